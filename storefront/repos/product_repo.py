# storefront/repos/product_repo.py
from typing import Iterable, List

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from storefront.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_active_product(self, product_id: int) -> ProductModel | None:
        return self.db.execute(
            select(ProductModel).where(
                ProductModel.id == product_id,
                ProductModel.is_active.is_(True),
            )
        ).scalar_one_or_none()

    def get_active_products_by_ids(self, product_ids: Iterable[int]) -> List[ProductModel]:
        """Aktualne ceny i stan, nadpisuje to co sesja miala juz w pamieci."""
        ids = sorted(set(product_ids))
        if not ids:
            return []
        return list(
            self.db.execute(
                select(ProductModel)
                .where(ProductModel.id.in_(ids), ProductModel.is_active.is_(True))
                .order_by(ProductModel.id)
                .execution_options(populate_existing=True)
            ).scalars()
        )

    def lock_products_by_ids(self, product_ids: Iterable[int]) -> List[ProductModel]:
        """
        Odczyt w ramach transakcji zamowienia.
        FOR UPDATE blokuje wiersze (Postgres), stala kolejnosc po id chroni przed deadlockiem,
        populate_existing nadpisuje to co sesja miala juz w pamieci.
        """
        ids = sorted(set(product_ids))
        if not ids:
            return []
        return list(
            self.db.execute(
                select(ProductModel)
                .where(ProductModel.id.in_(ids))
                .order_by(ProductModel.id)
                .with_for_update()
                .execution_options(populate_existing=True)
            ).scalars()
        )

    def list_active_products(self, offset: int = 0, limit: int = 20) -> List[ProductModel]:
        return list(
            self.db.execute(
                select(ProductModel)
                .where(ProductModel.is_active.is_(True))
                .order_by(ProductModel.id)
                .offset(offset)
                .limit(limit)
            ).scalars()
        )

    def count_active_products(self) -> int:
        return self.db.execute(
            select(func.count()).select_from(ProductModel).where(ProductModel.is_active.is_(True))
        ).scalar_one()

    def decrement_stock(self, product_id: int, quantity: int, expected_version: int) -> int:
        """
        Atomowe sprawdz-i-zdejmij: UPDATE ... WHERE version = :v AND stock >= :q.
        Zwraca rowcount, 0 oznacza ze ktos zmienil produkt od naszego odczytu.
        """
        result = self.db.execute(
            update(ProductModel)
            .where(
                ProductModel.id == product_id,
                ProductModel.version == expected_version,
                ProductModel.stock >= quantity,
            )
            .values(
                stock=ProductModel.stock - quantity,
                version=ProductModel.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    def increment_stock(self, product_id: int, quantity: int) -> int:
        result = self.db.execute(
            update(ProductModel)
            .where(ProductModel.id == product_id)
            .values(
                stock=ProductModel.stock + quantity,
                version=ProductModel.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

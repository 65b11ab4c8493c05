# storefront/repos/cart_repo.py
from typing import Iterable, List

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from storefront.data.models.cart_item import CartItemModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart_items(self, user_id: int) -> List[CartItemModel]:
        return list(
            self.db.execute(
                select(CartItemModel)
                .where(CartItemModel.user_id == user_id)
                .order_by(CartItemModel.created_at.desc(), CartItemModel.id.desc())
            ).scalars()
        )

    def get_cart_item(self, user_id: int, product_id: int) -> CartItemModel | None:
        return self.db.execute(
            select(CartItemModel).where(
                CartItemModel.user_id == user_id,
                CartItemModel.product_id == product_id,
            )
        ).scalar_one_or_none()

    def add_cart_item(self, item: CartItemModel) -> CartItemModel:
        self.db.add(item)
        self.db.flush()
        return item

    def delete_cart_items(self, user_id: int, product_ids: Iterable[int] | None = None) -> int:
        stmt = delete(CartItemModel).where(CartItemModel.user_id == user_id)
        if product_ids is not None:
            stmt = stmt.where(CartItemModel.product_id.in_(list(product_ids)))
        result = self.db.execute(stmt.execution_options(synchronize_session=False))
        return result.rowcount

    def commit(self):
        self.db.commit()

    def rollback(self):
        self.db.rollback()

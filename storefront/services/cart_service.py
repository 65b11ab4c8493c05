from typing import Dict, Any, Iterable
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from storefront.data.models.cart_item import CartItemModel
from storefront.domain.errors import InsufficientStockError, ProductUnavailableError
from storefront.domain.pricing import PriceLine, PricingConfig, calculate_totals, money
from storefront.repos.cart_repo import CartRepo
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Koszyk użytkownika: lista (produkt, ilość), po jednym wierszu na produkt.
    commands (upsert, set, remove, clear) modyfikują stan
    query (get, list) tylko odczyt
    Każda operacja dotyczy wyłącznie koszyka podanego użytkownika.
    """

    def __init__(self, db: Session, pricing: PricingConfig | None = None):
        self.repo = CartRepo(db)
        self.products = ProductRepo(db)
        self.pricing = pricing or PricingConfig.from_settings()

    #query - odczyt
    def list_lines(self, user_id: int) -> list[CartItemModel]:
        return self.repo.get_cart_items(user_id)

    def get_cart(self, user_id: int) -> Dict[str, Any]:
        items = self.repo.get_cart_items(user_id)

        #podgląd cen z aktualnego katalogu, zamówienie i tak przeliczy je od nowa
        live = {p.id: p for p in self.products.get_active_products_by_ids(i.product_id for i in items)}

        lines = []
        for i in items:
            product = live.get(i.product_id)
            # wycofany produkt zostaje w koszyku, ale nie wchodzi do podsumowania
            price = product.price if product else i.product.price
            lines.append(
                {
                    "product_id": i.product_id,
                    "name": i.product.name,
                    "quantity": i.quantity,
                    "unit_price": money(price),
                    "line_total": PriceLine(price, i.quantity).line_total,
                    "available": product is not None,
                }
            )

        totals = calculate_totals(
            (PriceLine(unit_price=live[i.product_id].price, quantity=i.quantity) for i in items if i.product_id in live),
            self.pricing,
        )

        return {
            "user_id": user_id,
            "items": lines,
            "summary": {
                "item_count": sum(i.quantity for i in items if i.product_id in live),
                "subtotal": totals.subtotal,
                "tax": totals.tax,
                "shipping": totals.shipping,
                "total": totals.total,
            },
        }

    #commands
    def upsert_line(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        # Walidacje
        if quantity <= 0:
            raise ValueError("Ilość musi być większa niż 0")

        product = self.products.get_active_product(product_id)
        if not product:
            raise ProductUnavailableError(product_id)

        try:
            self._merge_line(user_id, product, quantity)
            self.repo.commit()
        except IntegrityError:
            # równoległe pierwsze dodanie tego samego produktu, wiersz już istnieje
            self.repo.rollback()
            logger.warning(
                f"Wiersz koszyka użytkownika {user_id} dla produktu {product_id} dodany równolegle, ponawiam jako scalenie"
            )
            try:
                self._merge_line(user_id, product, quantity)
                self.repo.commit()
            except Exception:
                self.repo.rollback()
                raise
        except Exception:
            self.repo.rollback()
            raise

        return self.get_cart(user_id)

    def set_quantity(self, user_id: int, product_id: int, quantity: int) -> Dict[str, Any]:
        """Ustawia ilość wprost. Ilość <= 0 usuwa pozycję."""
        if quantity <= 0:
            return self.remove_line(user_id, product_id)

        product = self.products.get_active_product(product_id)
        if not product:
            raise ProductUnavailableError(product_id)
        if product.stock < quantity:
            raise InsufficientStockError(product_id, requested=quantity, available=product.stock)

        try:
            existing_item = self.repo.get_cart_item(user_id, product_id)
            if existing_item:
                logger.info(
                    f"Zmiana ilości produktu {product_id} w koszyku użytkownika {user_id} "
                    f"z {existing_item.quantity} na {quantity}"
                )
                existing_item.quantity = quantity
            else:
                logger.info(f"Dodaję produkt {product_id} ({quantity} szt.) do koszyka użytkownika {user_id}")
                self.repo.add_cart_item(CartItemModel(user_id=user_id, product_id=product_id, quantity=quantity))
            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        return self.get_cart(user_id)

    def remove_line(self, user_id: int, product_id: int) -> Dict[str, Any]:
        logger.info(f"Usuwanie produktu {product_id} z koszyka użytkownika {user_id}")
        self.repo.delete_cart_items(user_id, [product_id])
        self.repo.commit()
        return self.get_cart(user_id)

    def clear_lines(self, user_id: int, product_ids: Iterable[int] | None = None) -> Dict[str, Any]:
        """Bez ``product_ids`` czyści cały koszyk."""
        ids = list(product_ids) if product_ids is not None else None
        removed = self.repo.delete_cart_items(user_id, ids)
        self.repo.commit()
        logger.info(f"Usunięto {removed} pozycji z koszyka użytkownika {user_id}")
        return self.get_cart(user_id)

    def _merge_line(self, user_id: int, product, quantity: int) -> None:
        existing_item = self.repo.get_cart_item(user_id, product.id)
        new_quantity = quantity + (existing_item.quantity if existing_item else 0)

        if product.stock < new_quantity:
            raise InsufficientStockError(product.id, requested=new_quantity, available=product.stock)

        if existing_item:
            logger.info(
                f"Produkt {product.id} już jest w koszyku użytkownika {user_id}, zwiększam ilość "
                f"z {existing_item.quantity} do {new_quantity}"
            )
            existing_item.quantity = new_quantity
        else:
            logger.info(f"Dodaję nowy produkt {product.id} do koszyka użytkownika {user_id}")
            self.repo.add_cart_item(
                CartItemModel(
                    user_id=user_id,
                    product_id=product.id,
                    quantity=quantity,
                )
            )

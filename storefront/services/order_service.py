# storefront/services/order_service.py
import math
import secrets
import string
import time
from collections.abc import Mapping
from typing import Any, Dict, Iterable

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel
from storefront.data.models.user import UserModel
from storefront.domain.errors import (
    ConcurrentModificationError,
    EmptyCartError,
    InsufficientStockError,
    OrderCreationFailedError,
    OrderNotFoundError,
    ProductUnavailableError,
)
from storefront.domain.order_status import OrderStatus, ensure_transition
from storefront.domain.pricing import PriceLine, PricingConfig, calculate_totals, money
from storefront.repos.cart_repo import CartRepo
from storefront.repos.order_repo import OrderRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.notification_service import NotificationService
from storefront.services.user_service import UserService
from storefront.utils.logging import get_logger
from storefront.utils.retry import transaction_retry
from storefront.utils.settings import CURRENCY, ORDER_PLACEMENT_MAX_ATTEMPTS, RESTOCK_ON_CANCEL

logger = get_logger(__name__)

_TOKEN_ALPHABET = string.ascii_uppercase + string.digits


def generate_order_id() -> str:
    token = "".join(secrets.choice(_TOKEN_ALPHABET) for _ in range(6))
    return f"ORD-{int(time.time() * 1000)}-{token}"


def _address_snapshot(address) -> Dict[str, Any]:
    if hasattr(address, "model_dump"):
        return address.model_dump()
    return dict(address)


class OrderService:
    """
    Serwis odpowiedzialny za domenę zamówień.

    Składanie zamówienia to jedna jednostka transakcyjna:
    ponowny odczyt produktów, wycena po cenach z bazy, zapis zamówienia ze
    snapshotem cen, warunkowe zdjęcie stanu i usunięcie kupionych pozycji z
    koszyka. Albo wszystko, albo nic.
    """

    def __init__(
        self,
        db: Session,
        pricing: PricingConfig | None = None,
        notification_service: NotificationService | None = None,
        restock_on_cancel: bool | None = None,
    ):
        self.db = db
        self.repo = OrderRepo(db)
        self.products = ProductRepo(db)
        self.cart = CartRepo(db)
        self.users = UserService(db)
        self.pricing = pricing or PricingConfig.from_settings()
        self.notification_service = notification_service or NotificationService()
        self.restock_on_cancel = RESTOCK_ON_CANCEL if restock_on_cancel is None else restock_on_cancel

    # =====================================================
    # COMMANDS
    # =====================================================
    def place_order(
        self,
        user_id: int | None,
        cart_lines: Iterable[Any] | None,
        shipping_address,
        billing_address=None,
        payment_method: str | None = None,
        notes: str | None = None,
    ) -> OrderModel:
        """
        Use Case: Złożenie zamówienia.

        1. Użytkownik zalogowany, koszyk niepusty
        2. Produkty istnieją i są aktywne, ilości <= stan (odczyt w transakcji)
        3. Zamówienie + pozycje ze snapshotem cen, zdjęcie stanu, czyszczenie koszyka
        4. Commit, powiadomienie (async)
        """
        user = self.users.authenticate(user_id)
        lines = self._merge_lines(cart_lines)

        if not shipping_address:
            raise ValueError("Adres wysyłki jest wymagany")
        shipping = _address_snapshot(shipping_address)
        billing = _address_snapshot(billing_address) if billing_address else dict(shipping)

        logger.info(f"Składanie zamówienia użytkownika {user.id}: {lines}")

        try:
            order = self._place_order_once(user.id, lines, shipping, billing, payment_method, notes)
        except (ConcurrentModificationError, SQLAlchemyError) as e:
            logger.error(f"Nie udało się utworzyć zamówienia użytkownika {user.id}: {e}")
            raise OrderCreationFailedError(
                user_id=user.id,
                attempts=ORDER_PLACEMENT_MAX_ATTEMPTS,
            ) from e

        logger.info(f"Order {order.id} created for user {user.id}, total {order.total}")

        # Wyślij powiadomienie asynchronicznie
        self.notification_service.send_order_placed(user.id, order.id, str(order.total))

        return order

    def place_order_from_cart(
        self,
        user_id: int | None,
        shipping_address,
        billing_address=None,
        payment_method: str | None = None,
        notes: str | None = None,
    ) -> OrderModel:
        """Zamówienie z całej zawartości zapisanego koszyka."""
        user = self.users.authenticate(user_id)
        lines = [{"product_id": i.product_id, "quantity": i.quantity} for i in self.cart.get_cart_items(user.id)]
        return self.place_order(user.id, lines, shipping_address, billing_address, payment_method, notes)

    @transaction_retry()
    def _place_order_once(
        self,
        user_id: int,
        lines: Dict[int, int],
        shipping: Dict[str, Any],
        billing: Dict[str, Any],
        payment_method: str | None,
        notes: str | None,
    ) -> OrderModel:
        try:
            # stan czytany w tej samej transakcji, w której zostanie zdjęty
            locked = {p.id: p for p in self.products.lock_products_by_ids(lines.keys())}

            for product_id in lines:
                product = locked.get(product_id)
                if product is None or not product.is_active:
                    raise ProductUnavailableError(product_id)

            for product_id, quantity in lines.items():
                if quantity > locked[product_id].stock:
                    raise InsufficientStockError(product_id, requested=quantity, available=locked[product_id].stock)

            #ceny tylko z bazy, nigdy od klienta
            price_lines = {
                product_id: PriceLine(unit_price=money(locked[product_id].price), quantity=quantity)
                for product_id, quantity in lines.items()
            }
            totals = calculate_totals(price_lines.values(), self.pricing)

            order = OrderModel(
                id=generate_order_id(),
                user_id=user_id,
                status=OrderStatus.PENDING.value,
                version=1,
                subtotal=totals.subtotal,
                tax=totals.tax,
                shipping=totals.shipping,
                total=totals.total,
                currency=CURRENCY,
                shipping_address=shipping,
                billing_address=billing,
                payment_method=payment_method,
                notes=notes,
                items=[
                    OrderItemModel(
                        product_id=product_id,
                        product_name=locked[product_id].name,
                        product_sku=locked[product_id].sku,
                        unit_price=line.unit_price,
                        quantity=line.quantity,
                        line_total=line.line_total,
                    )
                    for product_id, line in price_lines.items()
                ],
            )
            self.repo.add_order(order)

            for product_id, quantity in lines.items():
                rowcount = self.products.decrement_stock(
                    product_id=product_id,
                    quantity=quantity,
                    expected_version=locked[product_id].version,
                )
                # 0 rows affected - produkt zmieniony od naszego odczytu
                if rowcount == 0:
                    logger.warning(
                        f"Konflikt współbieżności na produkcie {product_id} "
                        f"(wersja {locked[product_id].version}), ponawiam"
                    )
                    raise ConcurrentModificationError(product_id=product_id)

            # tylko kupione pozycje, reszta koszyka zostaje
            self.cart.delete_cart_items(user_id, lines.keys())

            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        return order

    def cancel_order(self, order_id: str, user_id: int | None) -> OrderModel:
        """
        Use Case: Anulowanie zamówienia przez właściciela (lub admina).
        Dozwolone tylko z PENDING/CONFIRMED.
        Stan wraca do magazynu wyłącznie przy włączonym RESTOCK_ON_CANCEL.
        """
        user = self.users.authenticate(user_id)
        order = self._get_visible_order(order_id, user)
        return self._change_status(order, OrderStatus.CANCELLED)

    def update_status(self, order_id: str, new_status: OrderStatus | str, user_id: int | None) -> OrderModel:
        """Use Case: Zmiana statusu przez administratora."""
        user = self.users.authenticate(user_id)
        if not user.is_admin:
            raise PermissionError("Tylko administrator może zmieniać status zamówienia")

        order = self.repo.get_order(order_id)
        if not order:
            raise OrderNotFoundError(order_id)

        return self._change_status(order, OrderStatus(new_status))

    def _change_status(self, order: OrderModel, target: OrderStatus) -> OrderModel:
        ensure_transition(order.id, order.status, target)

        logger.info(f"Zmiana statusu zamówienia {order.id}: {order.status} -> {target.value}")

        try:
            rowcount = self.repo.update_order_status(order.id, order.version, target.value)
            if rowcount == 0:
                raise ConcurrentModificationError(
                    "Konflikt współbieżności - zamówienie zostało zmodyfikowane przez inną operację",
                    order_id=order.id,
                )

            if target == OrderStatus.CANCELLED and self.restock_on_cancel:
                for item in order.items:
                    self.products.increment_stock(item.product_id, item.quantity)
                logger.info(f"Zwrócono stan magazynowy dla zamówienia {order.id}")

            self.repo.commit()
        except Exception:
            self.repo.rollback()
            raise

        self.db.refresh(order)
        self.notification_service.send_status_changed(order.user_id, order.id, order.status)
        return order

    # =====================================================
    # QUERY
    # =====================================================
    def get_order(self, order_id: str, user_id: int | None) -> OrderModel:
        user = self.users.authenticate(user_id)
        return self._get_visible_order(order_id, user)

    def list_orders_for_user(
        self,
        user_id: int | None,
        page: int = 1,
        limit: int = 10,
        status: OrderStatus | str | None = None,
        all_users: bool = False,
    ) -> Dict[str, Any]:
        """Zamówienia użytkownika, najnowsze pierwsze. Admin może poprosić o wszystkie."""
        user = self.users.authenticate(user_id)
        scope = None if (all_users and user.is_admin) else user.id
        status_value = OrderStatus(status).value if status else None

        page = max(page, 1)
        total = self.repo.count_orders(scope, status_value)
        orders = self.repo.list_orders(scope, status_value, offset=(page - 1) * limit, limit=limit)
        total_pages = math.ceil(total / limit) if limit else 0

        return {
            "orders": orders,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "total_pages": total_pages,
                "has_next": page < total_pages,
                "has_prev": page > 1,
            },
        }

    # =====================================================
    # HELPERS
    # =====================================================
    def _get_visible_order(self, order_id: str, user: UserModel) -> OrderModel:
        order = self.repo.get_order(order_id)

        if not order:
            raise OrderNotFoundError(order_id)

        if order.user_id != user.id and not user.is_admin:
            raise PermissionError("Brak dostępu do zamówienia")

        return order

    @staticmethod
    def _merge_lines(cart_lines: Iterable[Any] | None) -> Dict[int, int]:
        """(product_id, quantity) -> {product_id: suma ilości}; duplikaty są sklejane jak w koszyku."""
        merged: Dict[int, int] = {}
        for line in cart_lines or []:
            if isinstance(line, Mapping):
                product_id, quantity = line["product_id"], line["quantity"]
            else:
                product_id, quantity = line.product_id, line.quantity
            if quantity < 1:
                raise ValueError("Ilość musi być większa niż 0")
            merged[product_id] = merged.get(product_id, 0) + quantity

        if not merged:
            raise EmptyCartError()

        return merged

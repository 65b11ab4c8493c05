# storefront/domain/errors.py
"""
Bledy domenowe sklepu.

Kazdy blad niesie kod, status HTTP i slownik ``details`` tak, zeby warstwa
wyzej mogla pokazac konkretny komunikat (np. zaproponowac zmniejszenie ilosci
do ``available``) zamiast ogolnego "cos poszlo nie tak".
"""
from typing import Any, Dict


class StorefrontError(Exception):
    status_code = 400
    code = "storefront_error"

    def __init__(self, message: str, **details: Any):
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = details

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class UnauthenticatedError(StorefrontError):
    status_code = 401
    code = "unauthenticated"

    def __init__(self, message: str = "Wymagane zalogowanie"):
        super().__init__(message)


class EmptyCartError(StorefrontError):
    status_code = 400
    code = "empty_cart"

    def __init__(self, message: str = "Koszyk jest pusty"):
        super().__init__(message)


class ProductUnavailableError(StorefrontError):
    status_code = 400
    code = "product_unavailable"

    def __init__(self, product_id: int):
        super().__init__(f"Produkt {product_id} nie istnieje lub jest nieaktywny", product_id=product_id)
        self.product_id = product_id


class InsufficientStockError(StorefrontError):
    status_code = 409
    code = "insufficient_stock"

    def __init__(self, product_id: int, requested: int, available: int):
        super().__init__(
            f"Niewystarczajacy stan magazynowy produktu {product_id}: "
            f"zadano {requested}, dostepne {available}",
            product_id=product_id,
            requested=requested,
            available=available,
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available


class InvalidTransitionError(StorefrontError):
    status_code = 409
    code = "invalid_transition"

    def __init__(self, order_id: str, current: str, target: str):
        super().__init__(
            f"Niedozwolona zmiana statusu zamowienia {order_id}: {current} -> {target}",
            order_id=order_id,
            current_status=current,
            target_status=target,
        )
        self.order_id = order_id
        self.current = current
        self.target = target


class OrderNotFoundError(StorefrontError):
    status_code = 404
    code = "order_not_found"

    def __init__(self, order_id: str):
        super().__init__(f"Zamowienie {order_id} nie istnieje", order_id=order_id)
        self.order_id = order_id


class ConcurrentModificationError(StorefrontError):
    status_code = 409
    code = "concurrent_modification"

    def __init__(self, message: str = "Konflikt wspolbieznosci", **details: Any):
        super().__init__(message, **details)


class OrderCreationFailedError(StorefrontError):
    status_code = 503
    code = "order_creation_failed"

    def __init__(self, message: str = "Nie udalo sie utworzyc zamowienia", **details: Any):
        super().__init__(message, **details)

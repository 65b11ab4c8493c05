# storefront/api/routers/orders.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.api.deps import get_current_user_id
from storefront.data.database import get_db
from storefront.domain.order_status import OrderStatus
from storefront.domain.schemas import OrderCreate, OrderOut, OrderPage, StatusUpdate
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session):
    return OrderService(db)


@router.post("/", response_model=OrderOut, status_code=201)
def create_order(
    payload: OrderCreate,
    user_id: int | None = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Tworzy zamówienie z podanych pozycji albo, bez ``items``, z koszyka użytkownika.
    Wysyła powiadomienie asynchronicznie.
    """
    svc = get_service(db)
    try:
        if payload.items is None:
            return svc.place_order_from_cart(
                user_id,
                shipping_address=payload.shipping_address,
                billing_address=payload.billing_address,
                payment_method=payload.payment_method,
                notes=payload.notes,
            )
        return svc.place_order(
            user_id,
            payload.items,
            shipping_address=payload.shipping_address,
            billing_address=payload.billing_address,
            payment_method=payload.payment_method,
            notes=payload.notes,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/", response_model=OrderPage)
def list_orders(
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status: OrderStatus | None = Query(None),
    all_users: bool = Query(False, alias="all"),
    user_id: int | None = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return get_service(db).list_orders_for_user(
        user_id, page=page, limit=limit, status=status, all_users=all_users
    )


@router.get("/{order_id}", response_model=OrderOut)
def get_order(
    order_id: str,
    user_id: int | None = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    Pobiera szczegóły zamówienia.
    """
    svc = get_service(db)
    try:
        return svc.get_order(order_id, user_id)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))


@router.post("/{order_id}/cancel", response_model=OrderOut)
def cancel_order(
    order_id: str,
    user_id: int | None = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.cancel_order(order_id, user_id)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))


@router.patch("/{order_id}/status", response_model=OrderOut)
def update_status(
    order_id: str,
    payload: StatusUpdate,
    user_id: int | None = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.update_status(order_id, payload.status, user_id)
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e))

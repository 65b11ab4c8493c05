#storefront/api/routers/carts.py
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from storefront.api.deps import get_current_user_id
from storefront.data.database import get_db
from storefront.domain.schemas import CartOut, ItemIn, QuantityIn
from storefront.services.cart_service import CartService
from storefront.services.user_service import UserService

router = APIRouter(prefix="/cart", tags=["cart"])


def get_service(db: Session):
    return CartService(db=db)


@router.get("/", response_model=CartOut)
def get_cart(
    user_id: int | None = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    user = UserService(db).authenticate(user_id)
    return get_service(db).get_cart(user.id)


@router.post("/items", response_model=CartOut, status_code=201)
def add_item(
    payload: ItemIn,
    user_id: int | None = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    user = UserService(db).authenticate(user_id)
    svc = get_service(db)
    try:
        return svc.upsert_line(
            user_id=user.id,
            product_id=payload.product_id,
            quantity=payload.quantity,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.patch("/items/{product_id}", response_model=CartOut)
def set_item_quantity(
    product_id: int,
    payload: QuantityIn,
    user_id: int | None = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    user = UserService(db).authenticate(user_id)
    return get_service(db).set_quantity(user.id, product_id, payload.quantity)


@router.delete("/items/{product_id}", response_model=CartOut)
def remove_item(
    product_id: int,
    user_id: int | None = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    user = UserService(db).authenticate(user_id)
    return get_service(db).remove_line(user.id, product_id)


@router.delete("/", response_model=CartOut)
def clear_cart(
    user_id: int | None = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    user = UserService(db).authenticate(user_id)
    return get_service(db).clear_lines(user.id)

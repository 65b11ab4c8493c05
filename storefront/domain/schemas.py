# storefront/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Optional
from decimal import Decimal
from datetime import datetime

from storefront.domain.order_status import OrderStatus


class UserCreate(BaseModel):
    """Schema dla tworzenia użytkownika."""

    id: int = Field(..., gt=0, description="ID użytkownika (musi być > 0)")
    name: str = Field(..., min_length=1, max_length=100, description="Imię użytkownika")
    email: Optional[str] = Field(None, max_length=255)
    role: str = Field("USER", pattern="^(USER|ADMIN)$")


class UserRead(BaseModel):
    """Schema dla użytkownika (response)."""

    id: int
    name: str
    email: Optional[str] = None
    role: str

    model_config = ConfigDict(from_attributes=True)


class ProductOut(BaseModel):
    id: int
    sku: str
    name: str
    description: Optional[str] = None
    price: Decimal
    stock: int

    model_config = ConfigDict(from_attributes=True)


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    total_pages: int
    has_next: bool
    has_prev: bool


class ProductPage(BaseModel):
    products: List[ProductOut]
    pagination: Pagination


class ItemIn(BaseModel):
    """Pozycja koszyka / zamówienia wysłana przez klienta. Cena nigdy nie przychodzi od klienta."""

    product_id: int = Field(..., gt=0, description="ID produktu (musi być > 0)")
    quantity: int = Field(..., gt=0, description="Ilość produktu (musi być > 0)")


class QuantityIn(BaseModel):
    """Nowa ilość pozycji koszyka, 0 lub mniej usuwa pozycję."""

    quantity: int


class CartItemOut(BaseModel):
    product_id: int
    name: str
    quantity: int
    unit_price: Decimal
    line_total: Decimal
    available: bool = True


class CartSummary(BaseModel):
    item_count: int
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal


class CartOut(BaseModel):
    """Schema dla koszyka (response)."""

    user_id: int
    items: List[CartItemOut]
    summary: CartSummary


class Address(BaseModel):
    street: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: Optional[str] = None
    zip_code: str = Field(..., min_length=1)
    country: str = Field(..., min_length=2)
    phone: Optional[str] = None


class OrderCreate(BaseModel):
    """
    Schema dla tworzenia zamówienia.
    Bez ``items`` zamówienie powstaje z aktualnej zawartości koszyka użytkownika.
    """

    items: Optional[List[ItemIn]] = None
    shipping_address: Address
    billing_address: Optional[Address] = None
    payment_method: Optional[str] = Field(None, max_length=50)
    notes: Optional[str] = Field(None, max_length=1000)


class OrderItemOut(BaseModel):
    product_id: int
    product_name: str
    product_sku: str
    unit_price: Decimal
    quantity: int
    line_total: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    """Schema dla zamówienia (response)."""

    id: str
    user_id: int
    status: OrderStatus
    subtotal: Decimal
    tax: Decimal
    shipping: Decimal
    total: Decimal
    currency: str
    shipping_address: dict
    billing_address: dict
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    items: List[OrderItemOut]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderPage(BaseModel):
    orders: List[OrderOut]
    pagination: Pagination


class StatusUpdate(BaseModel):
    status: OrderStatus

# app/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import List, Optional
from decimal import Decimal
from datetime import datetime
from uuid import UUID

from app.domain.order_status import OrderStatus, PaymentMethod

MAX_ITEM_QUANTITY = 10_000


class OrderItemIn(BaseModel):
    """Pozycja koszyka przy skladaniu zamowienia."""

    product_id: int = Field(..., gt=0, description="ID produktu (musi być > 0)")
    quantity: int = Field(..., gt=0, le=MAX_ITEM_QUANTITY, description="Ilość produktu (1..10000)")
    price: Decimal = Field(
        ...,
        gt=0,
        max_digits=10,
        decimal_places=2,
        description="Cena widziana przez klienta, weryfikowana z katalogiem",
    )


class AddressIn(BaseModel):
    street: str = Field(..., min_length=3)
    city: str = Field(..., min_length=2)
    country: str = Field(..., min_length=2)
    postal_code: str = Field(..., min_length=3)


class OrderCreate(BaseModel):
    """Schema dla tworzenia zamówienia."""

    items: List[OrderItemIn] = Field(..., min_length=1)
    shipping_address: AddressIn
    billing_address: Optional[AddressIn] = None
    payment_method: PaymentMethod
    customer_note: Optional[str] = Field(None, max_length=500)
    idempotency_key: Optional[UUID] = None

    @field_validator("items")
    @classmethod
    def unique_products(cls, items: List[OrderItemIn]) -> List[OrderItemIn]:
        ids = [i.product_id for i in items]
        if len(ids) != len(set(ids)):
            raise ValueError("Each product may appear only once in an order")
        return items


class OrderStatusUpdate(BaseModel):
    status: OrderStatus
    tracking_number: Optional[str] = Field(None, min_length=1, max_length=100)

    @field_validator("status")
    @classmethod
    def public_status(cls, status: OrderStatus) -> OrderStatus:
        if status == OrderStatus.PENDING_REVIEW:
            raise ValueError("PENDING_REVIEW is set by fraud screening only")
        return status


class AddressOut(BaseModel):
    street: str
    city: str
    country: str
    postal_code: str

    model_config = ConfigDict(from_attributes=True)


class OrderItemOut(BaseModel):
    product_id: int
    quantity: int
    price: Decimal
    subtotal: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderEventOut(BaseModel):
    type: str
    user_id: str
    payload: dict
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    """Schema dla zamówienia (response)."""

    id: int
    user_id: int
    status: str
    total: Decimal
    payment_method: str
    customer_note: Optional[str] = None
    idempotency_key: Optional[str] = None
    tracking_number: Optional[str] = None
    items: List[OrderItemOut]
    shipping_address: AddressOut
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderDetailOut(OrderOut):
    billing_address: AddressOut
    events: List[OrderEventOut] = []


class PageMeta(BaseModel):
    page: int
    limit: int
    total: int
    totalPages: int


class OrderPage(BaseModel):
    data: List[OrderOut]
    meta: PageMeta

"""Order schemas."""
from datetime import date, datetime
from typing import Any
from pydantic import Field
from app.models.order import OrderStatus, PaymentMethod, PaymentStatus, ServiceTier
from app.schemas.base import CamelModel


class OrderCreate(CamelModel):
    """Fields are validated in the order service so every missing field yields the same message."""
    service_tier: str | None = None
    before_photos: list[str] | None = None
    pickup_date: date | None = None
    pickup_time: str | None = None
    delivery_address: str | None = None
    price: float | None = None


class OrderStatusUpdate(CamelModel):
    status: str | None = None


class AfterPhotosUpdate(CamelModel):
    # Any JSON value is accepted here; the service rejects anything but a list of strings
    after_photos: Any = None


class PaymentUpdate(CamelModel):
    """Only supplied fields are applied."""
    transaction_id: str | None = None
    status: str | None = None
    method: str | None = None


class PaymentResponse(CamelModel):
    status: PaymentStatus
    method: PaymentMethod | None = None
    transaction_id: str | None = None
    paid_at: datetime | None = None
    amount: float
    currency: str


class OrderUserSummary(CamelModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone: str


class OrderResponse(CamelModel):
    id: int
    user_id: int
    user: OrderUserSummary | None = None
    service_tier: ServiceTier
    before_photos: list[str] = Field(default_factory=list)
    after_photos: list[str] = Field(default_factory=list)
    pickup_date: date
    pickup_time: str
    delivery_address: str
    status: OrderStatus
    price: float
    payment: PaymentResponse
    estimated_delivery: date | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class OrderListResponse(CamelModel):
    orders: list[OrderResponse]

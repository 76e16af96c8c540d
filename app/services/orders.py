"""Cleaning orders: checkout, listing, status tracking and payment updates."""
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session, joinedload

from app.config import get_settings
from app.errors import ForbiddenError, NotFoundError, ValidationError
from app.models.order import (
    ESTIMATED_DELIVERY_DAYS,
    Order,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
    ServiceTier,
)
from app.models.user import User, UserRole
from app.schemas.order import OrderCreate, OrderResponse, OrderUserSummary, PaymentResponse, PaymentUpdate


def _enum_or_none(enum_cls, value):
    try:
        return enum_cls(value)
    except ValueError:
        return None


def order_to_response(order: Order, include_user: bool = False) -> OrderResponse:
    """Build OrderResponse with the nested payment record (and owner contact details for listings)."""
    user = None
    if include_user and order.user is not None:
        user = OrderUserSummary.model_validate(order.user)
    return OrderResponse(
        id=order.id,
        user_id=order.user_id,
        user=user,
        service_tier=order.service_tier,
        before_photos=list(order.before_photos or []),
        after_photos=list(order.after_photos or []),
        pickup_date=order.pickup_date,
        pickup_time=order.pickup_time,
        delivery_address=order.delivery_address,
        status=order.status,
        price=order.price,
        payment=PaymentResponse(
            status=order.payment_status,
            method=order.payment_method,
            transaction_id=order.payment_transaction_id,
            paid_at=order.payment_paid_at,
            amount=order.payment_amount,
            currency=order.payment_currency,
        ),
        estimated_delivery=order.estimated_delivery,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


def _get_order_or_404(db: Session, order_id: int) -> Order:
    order = db.query(Order).filter(Order.id == order_id).first()
    if not order:
        raise NotFoundError("Order not found")
    return order


def _check_owner(order: Order, user: User) -> None:
    """Customers may only touch their own orders; staff may touch any."""
    if user.role == UserRole.customer and order.user_id != user.id:
        raise ForbiddenError("Access denied")


def create_order(db: Session, user: User, data: OrderCreate) -> Order:
    pickup_time = (data.pickup_time or "").strip()
    delivery_address = (data.delivery_address or "").strip()
    if not (data.service_tier and data.pickup_date and pickup_time and delivery_address and data.price):
        raise ValidationError("All fields are required")
    tier = _enum_or_none(ServiceTier, data.service_tier)
    if tier is None:
        raise ValidationError("Invalid service tier")
    if data.price < 0:
        raise ValidationError("Price must be positive")

    order = Order(
        user_id=user.id,
        service_tier=tier,
        before_photos=list(data.before_photos or []),
        after_photos=[],
        pickup_date=data.pickup_date,
        pickup_time=pickup_time,
        delivery_address=delivery_address,
        status=OrderStatus.submitted,
        price=data.price,
        estimated_delivery=data.pickup_date + timedelta(days=ESTIMATED_DELIVERY_DAYS),
        payment_status=PaymentStatus.pending,
        payment_amount=data.price,
        payment_currency=get_settings().currency,
    )
    db.add(order)
    db.commit()
    db.refresh(order)
    return order


def list_orders(db: Session, user: User) -> list[Order]:
    """Customers see their own orders, staff see all; newest first."""
    q = db.query(Order).options(joinedload(Order.user))
    if user.role == UserRole.customer:
        q = q.filter(Order.user_id == user.id)
    return q.order_by(Order.created_at.desc(), Order.id.desc()).all()


def get_order(db: Session, user: User, order_id: int) -> Order:
    order = _get_order_or_404(db, order_id)
    _check_owner(order, user)
    return order


def update_order_status(db: Session, order_id: int, status: str | None) -> Order:
    """Role is enforced by the route. Any status may replace any other."""
    new_status = _enum_or_none(OrderStatus, status)
    if new_status is None:
        raise ValidationError("Invalid status")
    order = _get_order_or_404(db, order_id)
    order.status = new_status
    db.commit()
    db.refresh(order)
    return order


def upload_after_photos(db: Session, order_id: int, after_photos) -> Order:
    """Replaces the whole after-photo list."""
    if not isinstance(after_photos, list) or not all(isinstance(p, str) for p in after_photos):
        raise ValidationError("After photos must be an array")
    order = _get_order_or_404(db, order_id)
    order.after_photos = list(after_photos)
    db.commit()
    db.refresh(order)
    return order


def update_order_payment(db: Session, user: User, order_id: int, data: PaymentUpdate) -> Order:
    """Partial update: fields left out of the request keep their current value."""
    status = method = None
    if data.status is not None:
        status = _enum_or_none(PaymentStatus, data.status)
        if status is None:
            raise ValidationError("Invalid payment status")
    if data.method is not None:
        method = _enum_or_none(PaymentMethod, data.method)
        if method is None:
            raise ValidationError("Invalid payment method")

    order = _get_order_or_404(db, order_id)
    _check_owner(order, user)

    if data.transaction_id is not None:
        order.payment_transaction_id = data.transaction_id
    if method is not None:
        order.payment_method = method
    if status is not None:
        order.payment_status = status
        if status == PaymentStatus.completed:
            order.payment_paid_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(order)
    return order

"""Cleaning orders. Every route requires a bearer token."""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user, require_staff
from app.models.user import User
from app.schemas.order import (
    AfterPhotosUpdate,
    OrderCreate,
    OrderListResponse,
    OrderResponse,
    OrderStatusUpdate,
    PaymentUpdate,
)
from app.services import orders as order_service

router = APIRouter(prefix="/orders", tags=["orders"], dependencies=[Depends(get_current_user)])


@router.post("", response_model=OrderResponse, status_code=201)
def create_order(
    data: OrderCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    order = order_service.create_order(db, current_user, data)
    return order_service.order_to_response(order)


@router.get("", response_model=OrderListResponse)
def list_orders(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Customers get their own orders; admins and technicians get all orders."""
    orders = order_service.list_orders(db, current_user)
    return OrderListResponse(orders=[order_service.order_to_response(o, include_user=True) for o in orders])


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(
    order_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    order = order_service.get_order(db, current_user, order_id)
    return order_service.order_to_response(order, include_user=True)


@router.patch("/{order_id}", response_model=OrderResponse)
def update_order_status(
    order_id: int,
    data: OrderStatusUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    order = order_service.update_order_status(db, order_id, data.status)
    return order_service.order_to_response(order)


@router.patch("/{order_id}/after-photos", response_model=OrderResponse)
def upload_after_photos(
    order_id: int,
    data: AfterPhotosUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_staff),
):
    order = order_service.upload_after_photos(db, order_id, data.after_photos)
    return order_service.order_to_response(order)


@router.patch("/{order_id}/payment", response_model=OrderResponse)
def update_order_payment(
    order_id: int,
    data: PaymentUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    order = order_service.update_order_payment(db, current_user, order_id, data)
    return order_service.order_to_response(order)

"""Cleaning orders and their payment record."""
from sqlalchemy import Column, Integer, String, Float, Date, ForeignKey, DateTime, JSON, Index, Enum as SQLEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base
import enum


class ServiceTier(str, enum.Enum):
    bronze = "bronze"
    silver = "silver"
    gold = "gold"


class OrderStatus(str, enum.Enum):
    submitted = "submitted"
    picked_up = "picked-up"
    cleaning = "cleaning"
    ready = "ready"
    delivered = "delivered"


class PaymentStatus(str, enum.Enum):
    pending = "pending"
    completed = "completed"
    failed = "failed"
    refunded = "refunded"


class PaymentMethod(str, enum.Enum):
    card = "card"
    eft = "eft"


ESTIMATED_DELIVERY_DAYS = 3


class Order(Base):
    __tablename__ = "orders"
    __table_args__ = (Index("ix_orders_user_created", "user_id", "created_at"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    service_tier = Column(SQLEnum(ServiceTier), nullable=False)
    before_photos = Column(JSON, nullable=False, default=list)
    after_photos = Column(JSON, nullable=False, default=list)

    pickup_date = Column(Date, nullable=False)
    pickup_time = Column(String(50), nullable=False)
    delivery_address = Column(String(500), nullable=False)

    # No transition table: any status may follow any other
    status = Column(SQLEnum(OrderStatus), nullable=False, default=OrderStatus.submitted, index=True)
    price = Column(Float, nullable=False)
    estimated_delivery = Column(Date, nullable=True)

    # Payment record; amount is independent of price once a provider reports it
    payment_status = Column(SQLEnum(PaymentStatus), nullable=False, default=PaymentStatus.pending, index=True)
    payment_method = Column(SQLEnum(PaymentMethod), nullable=True)
    payment_transaction_id = Column(String(255), nullable=True)
    payment_paid_at = Column(DateTime(timezone=True), nullable=True)
    payment_amount = Column(Float, nullable=False)
    payment_currency = Column(String(3), nullable=False, default="ZAR")

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    user = relationship("User", backref="orders")

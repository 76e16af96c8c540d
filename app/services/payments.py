"""Yoco payment webhooks: signature check and mapping of events onto order payment state.

Every branch writes absolute values, so replaying an event leaves the order unchanged.
"""
import hashlib
import hmac
import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import Session

from app.errors import NotFoundError, ValidationError
from app.models.order import Order, PaymentMethod, PaymentStatus

log = logging.getLogger("uvicorn.error")

EVENT_PAYMENT_SUCCEEDED = "payment.succeeded"
EVENT_PAYMENT_FAILED = "payment.failed"
EVENT_REFUND_SUCCEEDED = "refund.succeeded"

# Provider reports amounts in cents
MINOR_UNITS_PER_MAJOR = 100

_STATUS_FOR_EVENT = {
    EVENT_PAYMENT_FAILED: PaymentStatus.failed,
    EVENT_REFUND_SUCCEEDED: PaymentStatus.refunded,
}


def compute_signature(raw_body: bytes, secret: str) -> str:
    return hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()


def verify_signature(raw_body: bytes, signature: str | None, secret: str) -> bool:
    """Hex HMAC-SHA256 of the exact request body. No secret or no signature never verifies."""
    if not secret or not signature:
        return False
    expected = compute_signature(raw_body, secret)
    return hmac.compare_digest(expected.encode("ascii"), signature.strip().lower().encode("utf-8"))


def _order_id_from(payload: dict) -> Any:
    metadata = payload.get("metadata") or {}
    if not isinstance(metadata, dict):
        return None
    return metadata.get("orderId")


def _find_order(db: Session, order_id: Any) -> Order | None:
    try:
        pk = int(order_id)
    except (TypeError, ValueError):
        return None
    return db.query(Order).filter(Order.id == pk).first()


def _handle_payment_succeeded(db: Session, payload: dict) -> None:
    order_id = _order_id_from(payload)
    if not order_id:
        log.warning("[Webhook] No orderId in payment.succeeded metadata")
        raise ValidationError("Missing orderId in metadata")
    order = _find_order(db, order_id)
    if not order:
        log.warning("[Webhook] Order not found: %s", order_id)
        raise NotFoundError("Order not found")

    order.payment_status = PaymentStatus.completed
    order.payment_transaction_id = payload.get("id")
    order.payment_paid_at = datetime.now(timezone.utc)
    order.payment_method = PaymentMethod.card
    amount = payload.get("amount")
    if amount is not None:
        order.payment_amount = float(amount) / MINOR_UNITS_PER_MAJOR
    db.commit()
    log.info("[Webhook] Payment completed for order %s", order.id)


def _handle_status_event(db: Session, event_type: str, payload: dict) -> None:
    """Missing orderId or unknown order is ignored for these events."""
    order_id = _order_id_from(payload)
    if not order_id:
        return
    order = _find_order(db, order_id)
    if not order:
        log.warning("[Webhook] %s for unknown order %s ignored", event_type, order_id)
        return
    order.payment_status = _STATUS_FOR_EVENT[event_type]
    db.commit()
    log.info("[Webhook] Payment %s for order %s", order.payment_status.value, order.id)


def process_event(db: Session, event: dict) -> None:
    """Apply one verified event. Raises ValidationError / NotFoundError only for payment.succeeded."""
    event_type = event.get("type")
    payload = event.get("payload") or {}
    if not isinstance(payload, dict):
        payload = {}
    log.info("[Webhook] Received Yoco event: %s", event_type)

    if event_type == EVENT_PAYMENT_SUCCEEDED:
        _handle_payment_succeeded(db, payload)
    elif event_type in _STATUS_FOR_EVENT:
        _handle_status_event(db, event_type, payload)

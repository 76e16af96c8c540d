"""Payment provider callbacks. Authenticated by signature only, no bearer token."""
import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from app.config import get_settings
from app.database import get_db
from app.errors import AppError
from app.services.payments import process_event, verify_signature

router = APIRouter(prefix="/webhooks", tags=["webhooks"])
log = logging.getLogger("uvicorn.error")

SIGNATURE_HEADER = "x-yoco-signature"


@router.post("/yoco")
async def yoco_webhook(request: Request, db: Session = Depends(get_db)):
    """
    Verify the HMAC signature over the raw body, then apply the event to the order's payment.
    Once the signature checks out the provider always gets 200, except for the
    payment.succeeded lookup failures (400/404) and unexpected errors (500).
    """
    secret = get_settings().yoco_webhook_secret
    if not secret:
        log.error("[Webhook] YOCO_WEBHOOK_SECRET not configured")
        return JSONResponse(status_code=500, content={"error": "Webhook secret not configured"})

    raw_body = await request.body()
    if not verify_signature(raw_body, request.headers.get(SIGNATURE_HEADER), secret):
        log.warning("[Webhook] Invalid signature")
        return JSONResponse(status_code=401, content={"error": "Invalid signature"})

    try:
        event = json.loads(raw_body)
    except ValueError:
        return JSONResponse(status_code=400, content={"error": "Invalid JSON body"})
    if not isinstance(event, dict):
        return JSONResponse(status_code=400, content={"error": "Invalid JSON body"})

    # Blocking ORM work stays off the event loop
    try:
        await run_in_threadpool(process_event, db, event)
    except AppError as e:
        return JSONResponse(status_code=e.status_code, content={"error": e.detail})
    except Exception:
        log.exception("[Webhook] processing failed")
        await run_in_threadpool(db.rollback)
        return JSONResponse(status_code=500, content={"error": "Webhook processing failed"})
    return {"received": True}

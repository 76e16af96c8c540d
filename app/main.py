"""KickBack API – FastAPI application."""
# Load .env before any app code that might read config
from dotenv import load_dotenv
from pathlib import Path
load_dotenv(Path(__file__).resolve().parent.parent / ".env")

import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.database import Base, engine
from app.errors import AppError
# Import models so Base.metadata has all tables before create_all (schema source of truth)
from app.models import User, PasswordReset, Order  # noqa: F401
from app.routers import auth, orders, webhooks

log = logging.getLogger("uvicorn.error")

settings = get_settings()
app = FastAPI(title=settings.app_name, debug=settings.debug)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[settings.frontend_url],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth.router)
app.include_router(orders.router)
app.include_router(webhooks.router)

_scheduler = None


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail, **exc.extra})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed or missing input is a 400, like every other validation failure."""
    errors = exc.errors()
    detail = "Invalid request"
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        detail = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    return JSONResponse(
        status_code=400,
        content={"detail": detail, "errors": [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors]},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    log.exception("Unhandled error on %s %s", request.method, request.url.path)
    content = {"detail": "Internal server error"}
    if settings.app_env == "development":
        content["error"] = str(exc)
    return JSONResponse(status_code=500, content=content)


@app.on_event("startup")
def startup():
    global _scheduler
    if not (settings.mailgun_api_key and settings.mailgun_domain) and not settings.sendgrid_api_key:
        log.warning("[Email] Not configured - welcome and reset emails will be skipped; set MAILGUN_API_KEY and MAILGUN_DOMAIN in .env")
    if not settings.yoco_webhook_secret:
        log.warning("[Webhook] YOCO_WEBHOOK_SECRET not set - payment webhooks will be rejected")
    try:
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        log.warning("Database startup failed (tables skipped). Check DATABASE_URL and network. Error: %s", e)

    if settings.reset_cleanup_enabled:
        from apscheduler.schedulers.background import BackgroundScheduler
        from app.services.reset_cleanup import run_reset_cleanup_job

        _scheduler = BackgroundScheduler()
        _scheduler.add_job(run_reset_cleanup_job, "interval", minutes=settings.reset_cleanup_interval_minutes)
        _scheduler.start()
        log.info("Reset code cleanup scheduled every %d minute(s)", settings.reset_cleanup_interval_minutes)


@app.on_event("shutdown")
def shutdown():
    global _scheduler
    if _scheduler is not None:
        _scheduler.shutdown(wait=False)
        _scheduler = None
    engine.dispose()
    log.info("Database connections closed")


@app.get("/")
def root():
    return {"app": settings.app_name, "status": "ok"}


@app.get("/health")
def health():
    return {
        "status": "ok",
        "message": "KickBack API is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

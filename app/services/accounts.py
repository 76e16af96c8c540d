"""Signup, signin and password reset by emailed code."""
import logging
import secrets
from datetime import datetime, timezone

from fastapi import BackgroundTasks
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.errors import AuthError, ConflictError, NotFoundError, ValidationError
from app.models.password_reset import PasswordReset, default_reset_expiry
from app.models.user import User, UserRole
from app.schemas.auth import PASSWORD_MIN_LENGTH, SignUpRequest, UserResponse
from app.services.auth import create_access_token, verify_password
from app.services import notifications

log = logging.getLogger("uvicorn.error")

INVALID_CREDENTIALS = "Invalid email or password"
INACTIVE_ACCOUNT = "Account is inactive. Please contact support."
FORGOT_PASSWORD_MESSAGE = "If an account exists with this email, a reset code has been sent."
INVALID_CODE = "Invalid or expired code"


def _normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def _check_password_length(password: str) -> None:
    if len(password or "") < PASSWORD_MIN_LENGTH:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")


def generate_reset_code() -> str:
    """Uniform 6-digit code in [100000, 999999]."""
    return str(100000 + secrets.randbelow(900000))


def user_with_token(user: User, message: str | None = None) -> dict:
    token = create_access_token(user.id, user.email, user.role)
    return {"message": message, "user": UserResponse.model_validate(user), "token": token}


def _send_welcome_email_safely(email: str, first_name: str) -> None:
    """Best effort, at most once. Failures are logged and never reach the caller."""
    try:
        if not notifications.send_welcome_email(email, first_name):
            log.warning("Welcome email not sent to %s", email)
    except Exception:
        log.exception("Welcome email failed for %s", email)


def sign_up(db: Session, data: SignUpRequest, background_tasks: BackgroundTasks | None = None) -> dict:
    email = _normalize_email(data.email)
    first_name = (data.first_name or "").strip()
    last_name = (data.last_name or "").strip()
    phone = (data.phone or "").strip()
    if not (email and data.password and first_name and last_name and phone):
        raise ValidationError("All fields are required")
    _check_password_length(data.password)

    if db.query(User).filter(User.email == email).first():
        raise ConflictError("Email already registered")

    user = User(
        email=email,
        role=UserRole.customer,
        first_name=first_name,
        last_name=last_name,
        phone=phone,
        address=data.address.model_dump(exclude_none=True) if data.address else None,
    )
    if data.preferred_pickup_location:
        user.preferred_pickup_location = data.preferred_pickup_location.model_dump(exclude_none=True)
    user.set_password(data.password)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent signup for the same address
        db.rollback()
        raise ConflictError("Email already registered")
    db.refresh(user)

    if background_tasks is not None:
        background_tasks.add_task(_send_welcome_email_safely, user.email, user.first_name)
    else:
        _send_welcome_email_safely(user.email, user.first_name)
    return user_with_token(user, message="Account created successfully")


def sign_in(db: Session, email: str, password: str) -> dict:
    email = _normalize_email(email)
    if not email or not password:
        raise ValidationError("Email and password are required")
    user = db.query(User).filter(User.email == email).first()
    if not user:
        log.info("Failed sign-in for %s", email)
        raise AuthError(INVALID_CREDENTIALS)
    if not user.is_active:
        raise AuthError(INACTIVE_ACCOUNT)
    if not verify_password(password, user.hashed_password):
        log.info("Failed sign-in for %s", email)
        raise AuthError(INVALID_CREDENTIALS)

    user.last_login = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)
    return user_with_token(user, message="Signed in successfully")


def forgot_password(db: Session, email: str) -> dict:
    """Response is identical whether or not the email is registered."""
    email = _normalize_email(email)
    if not email:
        raise ValidationError("Email is required")
    user = db.query(User).filter(User.email == email).first()
    if user:
        db.query(PasswordReset).filter(PasswordReset.email == email).delete()
        code = generate_reset_code()
        db.add(PasswordReset(email=email, code=code, expires_at=default_reset_expiry()))
        db.commit()
        try:
            if not notifications.send_password_reset_email(email, code):
                log.warning("Password reset email not sent to %s", email)
        except Exception:
            log.exception("Password reset email failed for %s", email)
    return {"message": FORGOT_PASSWORD_MESSAGE}


def _find_active_code(db: Session, email: str, code: str) -> PasswordReset | None:
    return (
        db.query(PasswordReset)
        .filter(
            PasswordReset.email == email,
            PasswordReset.code == code,
            PasswordReset.used.is_(False),
            PasswordReset.expires_at > datetime.now(timezone.utc),
        )
        .first()
    )


def verify_code(db: Session, email: str, code: str) -> dict:
    """Read-only: a code can be verified any number of times until it is used or expires."""
    email = _normalize_email(email)
    code = (code or "").strip()
    if not email or not code:
        raise ValidationError("Email and code are required")
    if not _find_active_code(db, email, code):
        raise ValidationError(INVALID_CODE, valid=False)
    return {"valid": True, "message": "Code verified successfully"}


def reset_password(db: Session, email: str, code: str, new_password: str) -> dict:
    email = _normalize_email(email)
    code = (code or "").strip()
    if not email or not code or not new_password:
        raise ValidationError("All fields are required")
    _check_password_length(new_password)

    reset = _find_active_code(db, email, code)
    if not reset:
        raise ValidationError(INVALID_CODE)
    user = db.query(User).filter(User.email == email).first()
    if not user:
        raise NotFoundError("User not found")

    # Password and code consumption commit together
    user.set_password(new_password)
    reset.used = True
    db.commit()
    return {"message": "Password reset successfully"}

"""One-time password reset codes, keyed by email."""
from datetime import datetime, timedelta, timezone

from sqlalchemy import Column, Integer, String, DateTime, Boolean
from sqlalchemy.orm import validates
from sqlalchemy.sql import func

from app.database import Base

RESET_CODE_EXPIRE_MINUTES = 15


def default_reset_expiry() -> datetime:
    return datetime.now(timezone.utc) + timedelta(minutes=RESET_CODE_EXPIRE_MINUTES)


class PasswordReset(Base):
    __tablename__ = "password_resets"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), nullable=False, index=True)
    code = Column(String(6), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=False, default=default_reset_expiry, index=True)
    used = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    @validates("email")
    def _normalize_email(self, key, value):
        return (value or "").strip().lower()

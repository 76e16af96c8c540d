"""User accounts and credentials."""
from sqlalchemy import Column, Integer, String, Enum as SQLEnum, DateTime, Boolean, JSON
from sqlalchemy.orm import validates
from sqlalchemy.sql import func
from app.database import Base
import enum


class UserRole(str, enum.Enum):
    customer = "customer"
    admin = "admin"
    technician = "technician"


STAFF_ROLES = (UserRole.admin, UserRole.technician)


def default_pickup_location() -> dict:
    return {"use_primary_address": True}


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    # Always stored lower-cased; uniqueness is therefore case-insensitive
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(SQLEnum(UserRole), nullable=False, default=UserRole.customer)

    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    phone = Column(String(50), nullable=False)

    # {street, suburb, city, province, postal_code}
    address = Column(JSON, nullable=True)
    # {use_primary_address, street, suburb, city, province, postal_code}
    preferred_pickup_location = Column(JSON, nullable=False, default=default_pickup_location)

    email_verified = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    last_login = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    @validates("email")
    def _normalize_email(self, key, value):
        return (value or "").strip().lower()

    def set_password(self, plain: str) -> None:
        """Hash and store a new password. The only writer of hashed_password."""
        from app.services.auth import get_password_hash

        self.hashed_password = get_password_hash(plain)

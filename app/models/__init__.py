"""
All SQLAlchemy models. Schema is the source of truth for new DBs.
Base.metadata.create_all() creates every table; no migration scripts needed for fresh installs.
"""
from app.models.user import User
from app.models.password_reset import PasswordReset
from app.models.order import Order

__all__ = [
    "User",
    "PasswordReset",
    "Order",
]

"""Shared dependencies: DB session, current user, role checks."""
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from app.database import get_db
from app.errors import AuthError, ForbiddenError
from app.models.user import STAFF_ROLES, User
from app.services.auth import decode_token

security = HTTPBearer(auto_error=False)


def get_current_user(
    db: Session = Depends(get_db),
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> User:
    """Resolve the bearer token to an active user. The result is passed explicitly to each flow."""
    if not credentials:
        raise AuthError("Not authenticated")
    payload = decode_token((credentials.credentials or "").strip())
    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        raise AuthError("Invalid token")
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise AuthError("User not found")
    if not user.is_active:
        raise AuthError("Account is inactive")
    return user


def require_staff(current_user: User = Depends(get_current_user)) -> User:
    """Admin or technician."""
    if current_user.role not in STAFF_ROLES:
        raise ForbiddenError("Insufficient permissions")
    return current_user

"""Credential hashing and bearer tokens (JWT)."""
from datetime import datetime, timedelta, timezone
import bcrypt
import jwt
from app.config import get_settings
from app.errors import AuthError


def _pwd_bytes(password: str, max_len: int = 72) -> bytes:
    return password.encode("utf-8")[:max_len]


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(_pwd_bytes(plain), hashed.encode("utf-8"))
    except Exception:
        return False


def get_password_hash(password: str) -> str:
    rounds = get_settings().bcrypt_rounds
    return bcrypt.hashpw(_pwd_bytes(password), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def create_access_token(user_id: int, email: str, role, expires_delta: timedelta | None = None) -> str:
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(days=settings.jwt_expiration_days)
    expire = datetime.now(timezone.utc) + expires_delta
    # PyJWT expects "sub" to be a string; "userId" matches the id in user responses
    payload = {
        "sub": str(user_id),
        "userId": user_id,
        "email": email,
        "role": getattr(role, "value", role),
        "exp": expire,
    }
    raw = jwt.encode(
        payload,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm,
    )
    return raw if isinstance(raw, str) else raw.decode("utf-8")


def decode_token(token: str) -> dict:
    """Return the token claims or raise AuthError."""
    payload, error = decode_token_with_error(token)
    if payload is None:
        if error == "expired":
            raise AuthError("Token expired")
        raise AuthError("Invalid token")
    return payload


def decode_token_with_error(token: str) -> tuple[dict | None, str | None]:
    """Decode JWT; returns (payload, error_message)."""
    if not token or not isinstance(token, str):
        return None, "empty token"
    token = token.strip()
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require": ["exp", "sub"]},
        )
        return payload, None
    except jwt.ExpiredSignatureError:
        return None, "expired"
    except jwt.PyJWTError as e:
        return None, str(e)

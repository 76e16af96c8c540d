"""Auth schemas."""
from datetime import datetime
from pydantic import EmailStr
from app.models.user import UserRole
from app.schemas.base import CamelModel

PASSWORD_MIN_LENGTH = 8


class Address(CamelModel):
    street: str | None = None
    suburb: str | None = None
    city: str | None = None
    province: str | None = None
    postal_code: str | None = None


class PickupLocation(Address):
    use_primary_address: bool = True


class SignUpRequest(CamelModel):
    email: EmailStr
    password: str
    first_name: str
    last_name: str
    phone: str
    address: Address | None = None
    preferred_pickup_location: PickupLocation | None = None


class SignInRequest(CamelModel):
    # Plain str: a malformed email must fail like any other bad credential
    email: str
    password: str


class ForgotPasswordRequest(CamelModel):
    email: str


class VerifyCodeRequest(CamelModel):
    email: str
    code: str


class ResetPasswordRequest(CamelModel):
    email: str
    code: str
    new_password: str


class UserResponse(CamelModel):
    id: int
    email: str
    first_name: str
    last_name: str
    phone: str
    role: UserRole
    address: Address | None = None
    preferred_pickup_location: PickupLocation | None = None
    email_verified: bool = False
    is_active: bool = True
    last_login: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AuthResponse(CamelModel):
    message: str | None = None
    user: UserResponse
    token: str


class MessageResponse(CamelModel):
    message: str


class VerifyCodeResponse(CamelModel):
    valid: bool
    message: str

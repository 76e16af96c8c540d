from app.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    SignInRequest,
    SignUpRequest,
    UserResponse,
    VerifyCodeRequest,
)
from app.schemas.order import OrderCreate, OrderListResponse, OrderResponse, PaymentUpdate

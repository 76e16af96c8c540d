"""Authentication: signup, signin and password reset."""
from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.dependencies import get_current_user
from app.models.user import User
from app.schemas.auth import (
    AuthResponse,
    ForgotPasswordRequest,
    MessageResponse,
    ResetPasswordRequest,
    SignInRequest,
    SignUpRequest,
    UserResponse,
    VerifyCodeRequest,
    VerifyCodeResponse,
)
from app.services import accounts

router = APIRouter(prefix="/api/auth", tags=["auth"])


@router.post("/signup", response_model=AuthResponse, status_code=201)
def signup(data: SignUpRequest, background_tasks: BackgroundTasks, db: Session = Depends(get_db)):
    """Create a customer account. The welcome email is sent after the response."""
    return accounts.sign_up(db, data, background_tasks)


@router.post("/signin", response_model=AuthResponse)
def signin(data: SignInRequest, db: Session = Depends(get_db)):
    return accounts.sign_in(db, data.email, data.password)


@router.post("/forgot-password", response_model=MessageResponse)
def forgot_password(data: ForgotPasswordRequest, db: Session = Depends(get_db)):
    return accounts.forgot_password(db, data.email)


@router.post("/verify-code", response_model=VerifyCodeResponse)
def verify_code(data: VerifyCodeRequest, db: Session = Depends(get_db)):
    return accounts.verify_code(db, data.email, data.code)


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(data: ResetPasswordRequest, db: Session = Depends(get_db)):
    return accounts.reset_password(db, data.email, data.code, data.new_password)


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return UserResponse.model_validate(current_user)

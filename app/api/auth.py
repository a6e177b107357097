# app/api/auth.py
from fastapi import APIRouter, Depends, BackgroundTasks
from sqlalchemy.orm import Session
from pydantic import BaseModel, EmailStr
from app.config import settings
from app.database import get_db
from app.core.exceptions import QuizRoomError, to_http_exception
from app.services import auth_service
from app.services.email_service import EmailService
from app.api.dependencies import get_email_service
import logging

logger = logging.getLogger(__name__)
router = APIRouter()


# Request Models
class SignupRequest(BaseModel):
    email: EmailStr
    password: str
    name: str


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str
    new_password: str


# Response Model
class AuthResponse(BaseModel):
    status_code: int
    details: str
    is_success: bool
    token: str | None = None
    user: dict | None = None


def _user_payload(user) -> dict:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "last_difficulty": user.last_difficulty
    }


async def send_reset_background(email_service: EmailService, email: str, reset_link: str):
    """Background task to send the reset email"""
    result = await email_service.send_password_reset_email(email, reset_link)
    if not result.success:
        logger.error(f"Failed to send reset email to {email}: {result.error_details or result.message}")


@router.post("/signup", response_model=AuthResponse, status_code=201)
async def signup(request: SignupRequest, db: Session = Depends(get_db)):
    """Register new user"""
    try:
        result = auth_service.register_user(
            db=db,
            email=request.email,
            password=request.password,
            name=request.name
        )
    except QuizRoomError as e:
        raise to_http_exception(e)

    return AuthResponse(
        status_code=201,
        details=result["message"],
        is_success=True,
        token=result["token"],
        user=_user_payload(result["user"])
    )


@router.post("/login", response_model=AuthResponse)
async def login(request: LoginRequest, db: Session = Depends(get_db)):
    """User login"""
    try:
        result = auth_service.login_user(db=db, email=request.email, password=request.password)
    except QuizRoomError as e:
        raise to_http_exception(e)

    return AuthResponse(
        status_code=200,
        details=result["message"],
        is_success=True,
        token=result["token"],
        user=_user_payload(result["user"])
    )


@router.post("/forgot-password", response_model=AuthResponse)
async def forgot_password(
        request: ForgotPasswordRequest,
        background_tasks: BackgroundTasks,
        db: Session = Depends(get_db),
        email_service: EmailService = Depends(get_email_service)
):
    """Send password reset link"""
    try:
        token = auth_service.create_password_reset(db=db, email=request.email)
    except QuizRoomError as e:
        raise to_http_exception(e)

    reset_link = f"{settings.frontend_url}/?resetToken={token}"
    background_tasks.add_task(send_reset_background, email_service, request.email, reset_link)

    return AuthResponse(status_code=200, details="Reset link sent", is_success=True)


@router.post("/reset-password", response_model=AuthResponse)
async def reset_password(request: ResetPasswordRequest, db: Session = Depends(get_db)):
    """Reset password"""
    try:
        result = auth_service.reset_password(
            db=db,
            token=request.token,
            new_password=request.new_password
        )
    except QuizRoomError as e:
        raise to_http_exception(e)

    return AuthResponse(
        status_code=200,
        details=result["message"],
        is_success=True,
        token=result["token"]
    )

# app/services/auth_service.py
import logging
from datetime import datetime, timedelta, timezone
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from app.models.user import User
from app.core.exceptions import ConflictError, InvalidStateError, UserNotFoundError
from app.core.security import hash_password, verify_password, create_access_token
from app.core.utils import generate_reset_token
from app.schemas.enums import Difficulty
from app.config import settings

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def _validate_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise InvalidStateError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def register_user(db: Session, email: str, password: str, name: str) -> dict:
    """Register new user and log them in"""
    _validate_password(password)

    if db.query(User).filter(User.email == email).first():
        raise ConflictError("Email already exists")

    user = User(
        email=email,
        password=hash_password(password),
        name=name,
        last_difficulty=Difficulty.EASY.value
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Email already exists")

    db.refresh(user)
    logger.info(f"✅ Registered user {user.id}")
    return {"message": "Registration successful", "token": create_access_token(user.id), "user": user}


def login_user(db: Session, email: str, password: str) -> dict:
    """Login user"""
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(password, user.password):
        raise InvalidStateError("Invalid email or password")

    return {"message": "Login successful", "token": create_access_token(user.id), "user": user}


def create_password_reset(db: Session, email: str) -> str:
    """Store a reset token for the user and return it"""
    user = db.query(User).filter(User.email == email).first()
    if not user:
        raise UserNotFoundError("User not found")

    user.reset_token = generate_reset_token()
    user.reset_token_expires_at = datetime.now(timezone.utc) + timedelta(
        minutes=settings.reset_token_expire_minutes
    )
    db.commit()
    return user.reset_token


def reset_password(db: Session, token: str, new_password: str) -> dict:
    """Reset password with a token from the reset email"""
    _validate_password(new_password)

    user = db.query(User).filter(User.reset_token == token).first()
    if not user or not user.reset_token_expires_at:
        raise InvalidStateError("Invalid or expired token")

    if datetime.now(timezone.utc) > _as_utc(user.reset_token_expires_at):
        raise InvalidStateError("Token expired")

    user.password = hash_password(new_password)
    user.reset_token = None
    user.reset_token_expires_at = None
    db.commit()

    return {"message": "Password updated successfully", "token": create_access_token(user.id)}

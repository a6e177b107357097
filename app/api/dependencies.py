# app/api/dependencies.py - Shared response model and request dependencies
from typing import Annotated, Optional
from fastapi import Depends, Header, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session
from app.database import get_db
from app.core.security import verify_token
from app.models.user import User
from app.services.email_service import EmailService
from app.services.question_generator import QuestionGenerator


# ================================
# SHARED RESPONSE MODELS
# ================================

class StandardResponse(BaseModel):
    status_code: int
    is_success: bool
    details: str
    data: Optional[dict] = None


# ================================
# AUTHENTICATION
# ================================

def get_current_user_id_from_token(authorization: Annotated[str | None, Header()] = None) -> int:
    """Extract and verify JWT token from Authorization header"""
    if not authorization:
        raise HTTPException(status_code=401, detail="Authorization header missing")

    if not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Invalid authorization format")

    token = authorization.split(" ", 1)[1]
    user_id = verify_token(token)

    if user_id is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    return user_id


def get_current_user(user_id: int = Depends(get_current_user_id_from_token),
                     db: Session = Depends(get_db)) -> User:
    """Load the user behind the bearer token"""
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return user


def get_current_user_id(user: User = Depends(get_current_user)) -> int:
    return user.id


# ================================
# COLLABORATORS
# ================================

def get_question_generator() -> QuestionGenerator:
    return QuestionGenerator.from_settings()


def get_email_service() -> EmailService:
    return EmailService()

# app/api/users.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from pydantic import BaseModel
from app.database import get_db
from app.models.user import User
from app.services import quiz_service
from app.api.dependencies import get_current_user

router = APIRouter()


# Response Models
class UserProfile(BaseModel):
    id: int
    email: str
    name: str
    last_difficulty: str
    total_quizzes: int
    average_score: int
    created_at: str | None = None


class ProfileResponse(BaseModel):
    status_code: int
    details: str
    is_success: bool
    user: UserProfile | None = None


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
        current_user: User = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """Get user profile with the difficulty suggested for the next quiz"""
    stats = quiz_service.get_dashboard_stats(db, current_user.id)

    return ProfileResponse(
        status_code=200,
        details="Profile retrieved successfully",
        is_success=True,
        user=UserProfile(
            id=current_user.id,
            email=current_user.email,
            name=current_user.name,
            last_difficulty=current_user.last_difficulty,
            total_quizzes=stats["total_quizzes"],
            average_score=stats["average_score"],
            created_at=current_user.created_at.isoformat() if current_user.created_at else None
        )
    )

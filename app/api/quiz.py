# app/api/quiz.py
from datetime import datetime
from typing import Dict, List, Optional
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from pydantic import BaseModel, Field
from app.config import settings
from app.database import get_db
from app.core.exceptions import QuizRoomError, to_http_exception
from app.schemas import Difficulty, Question, RawAnswer
from app.services import quiz_service
from app.services.question_generator import QuestionGenerator
from app.api.dependencies import StandardResponse, get_current_user_id, get_question_generator

router = APIRouter()


# REQUEST MODELS
class QuizStartRequest(BaseModel):
    subject: str = Field(min_length=1)
    chapter: str = Field(min_length=1)
    difficulty: Optional[Difficulty] = None  # defaults to the suggested difficulty
    question_count: Optional[int] = None


class QuizSubmitRequest(BaseModel):
    session_id: str = Field(min_length=1)
    subject: str
    chapter: str
    difficulty: Difficulty
    questions: List[Question] = Field(min_length=1)
    responses: Dict[int, Optional[RawAnswer]]
    created_at: Optional[datetime] = None


# QUIZ SESSION ENDPOINTS

@router.post("/start", response_model=StandardResponse)
async def start_quiz(
        request: QuizStartRequest,
        user_id: int = Depends(get_current_user_id),
        db: Session = Depends(get_db),
        generator: QuestionGenerator = Depends(get_question_generator)
):
    """Generate questions for a new solo quiz"""
    question_count = request.question_count or settings.default_question_count
    if question_count < 1 or question_count > settings.max_question_count:
        raise HTTPException(
            status_code=400,
            detail=f"Question count must be between 1 and {settings.max_question_count}"
        )

    try:
        result = await quiz_service.start_quiz(
            db=db,
            generator=generator,
            user_id=user_id,
            subject=request.subject,
            chapter=request.chapter,
            difficulty=request.difficulty,
            question_count=question_count
        )
    except QuizRoomError as e:
        raise to_http_exception(e)

    return StandardResponse(
        status_code=201,
        is_success=True,
        details="Quiz started successfully",
        data={
            "session_id": result["session_id"],
            "subject": result["subject"],
            "chapter": result["chapter"],
            "difficulty": result["difficulty"].value,
            "fallback_used": result["fallback_used"],
            "created_at": result["created_at"].isoformat(),
            "questions": [question.model_dump(mode="json") for question in result["questions"]]
        }
    )


@router.post("/submit", response_model=StandardResponse)
async def submit_quiz(
        request: QuizSubmitRequest,
        user_id: int = Depends(get_current_user_id),
        db: Session = Depends(get_db)
):
    """Score and store a finished quiz"""
    try:
        result = quiz_service.submit_quiz(
            db=db,
            user_id=user_id,
            session_id=request.session_id,
            subject=request.subject,
            chapter=request.chapter,
            difficulty=request.difficulty,
            questions=request.questions,
            responses=request.responses,
            created_at=request.created_at
        )
    except QuizRoomError as e:
        raise to_http_exception(e)

    return StandardResponse(
        status_code=200,
        is_success=True,
        details="Quiz completed!",
        data={
            **result,
            "difficulty": result["difficulty"].value,
            "next_difficulty": result["next_difficulty"].value,
            "completed_at": result["completed_at"].isoformat()
        }
    )


# QUIZ HISTORY ENDPOINTS

@router.get("/history", response_model=StandardResponse)
async def get_user_quiz_history(
        limit: int = 20,
        user_id: int = Depends(get_current_user_id),
        db: Session = Depends(get_db)
):
    """Get user's recent quiz history"""
    if limit < 1 or limit > 100:
        raise HTTPException(status_code=400, detail="Limit must be between 1 and 100")

    history = quiz_service.get_user_quiz_history(db, user_id, limit)

    return StandardResponse(
        status_code=200,
        is_success=True,
        details="Quiz history retrieved successfully",
        data={"quiz_history": [_serialize_dates(item) for item in history]}
    )


@router.get("/dashboard", response_model=StandardResponse)
async def get_dashboard(
        user_id: int = Depends(get_current_user_id),
        db: Session = Depends(get_db)
):
    """Dashboard statistics and suggested difficulty"""
    try:
        stats = quiz_service.get_dashboard_stats(db, user_id)
    except QuizRoomError as e:
        raise to_http_exception(e)

    return StandardResponse(
        status_code=200,
        is_success=True,
        details="Dashboard retrieved successfully",
        data={
            **stats,
            "recent_sessions": [_serialize_dates(item) for item in stats["recent_sessions"]],
            "suggested_difficulty": stats["suggested_difficulty"].value
        }
    )


@router.get("/sessions/{session_id}", response_model=StandardResponse)
async def get_quiz_session(
        session_id: str,
        user_id: int = Depends(get_current_user_id),
        db: Session = Depends(get_db)
):
    """Review a finished quiz"""
    try:
        result = quiz_service.get_quiz_session_review(db, user_id, session_id)
    except QuizRoomError as e:
        raise to_http_exception(e)

    return StandardResponse(
        status_code=200,
        is_success=True,
        details="Quiz session retrieved successfully",
        data=_serialize_dates(result)
    )


def _serialize_dates(item: dict) -> dict:
    return {
        key: value.isoformat() if isinstance(value, datetime) else value
        for key, value in item.items()
    }

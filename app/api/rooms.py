# app/api/rooms.py
from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session
from app.config import settings
from app.database import get_db
from app.core.exceptions import QuizRoomError, to_http_exception
from app.schemas import Difficulty, Question, RoomConfig, StudentProgress
from app.services import room_service
from app.services.question_generator import QuestionGenerator, generate_with_fallback
from app.api.dependencies import StandardResponse, get_current_user_id, get_question_generator

router = APIRouter()


# REQUEST MODELS
class GenerateRoomQuizRequest(BaseModel):
    subject: str = Field(min_length=1)
    topic: str = Field(min_length=1)
    difficulty: Difficulty = Difficulty.EASY
    question_count: int = Field(default=5, ge=1)
    duration_seconds: Optional[int] = Field(default=None, ge=0)


class PushQuizRequest(BaseModel):
    questions: List[Question]
    config: RoomConfig


def _room_data(snapshot) -> dict:
    return snapshot.model_dump(mode="json")


# ROOM ENDPOINTS

@router.post("", response_model=StandardResponse, status_code=201)
async def create_room(
        user_id: int = Depends(get_current_user_id),
        db: Session = Depends(get_db)
):
    """Create a new room owned by the current user"""
    try:
        snapshot = room_service.create_room(db, owner_id=user_id)
    except QuizRoomError as e:
        raise to_http_exception(e)

    return StandardResponse(
        status_code=201,
        is_success=True,
        details="Room created successfully",
        data=_room_data(snapshot)
    )


@router.get("/teacher/history", response_model=StandardResponse)
async def get_teacher_rooms(
        user_id: int = Depends(get_current_user_id),
        db: Session = Depends(get_db)
):
    """Rooms created by the current user, newest first"""
    rooms = room_service.get_teacher_rooms(db, owner_id=user_id)

    return StandardResponse(
        status_code=200,
        is_success=True,
        details="Rooms retrieved successfully",
        data={"rooms": [room.model_dump(mode="json") for room in rooms]}
    )


@router.get("/{code}", response_model=StandardResponse)
async def get_room(
        code: str,
        user_id: int = Depends(get_current_user_id),
        db: Session = Depends(get_db)
):
    """Current room snapshot; clients poll this"""
    snapshot = room_service.get_room(db, code)
    if not snapshot:
        raise HTTPException(status_code=404, detail="Room not found")

    return StandardResponse(
        status_code=200,
        is_success=True,
        details="Room retrieved successfully",
        data=_room_data(snapshot)
    )


@router.post("/{code}/join", response_model=StandardResponse)
async def join_room(
        code: str,
        user_id: int = Depends(get_current_user_id),
        db: Session = Depends(get_db)
):
    """Join a room as a student"""
    try:
        snapshot = room_service.join_room(db, code, user_id)
    except QuizRoomError as e:
        raise to_http_exception(e)

    return StandardResponse(
        status_code=200,
        is_success=True,
        details="Joined room successfully",
        data=_room_data(snapshot)
    )


@router.post("/{code}/generate", response_model=StandardResponse)
async def generate_room_quiz(
        code: str,
        request: GenerateRoomQuizRequest,
        user_id: int = Depends(get_current_user_id),
        db: Session = Depends(get_db),
        generator: QuestionGenerator = Depends(get_question_generator)
):
    """Generate questions for the room and push them to every participant"""
    if request.question_count > settings.max_question_count:
        raise HTTPException(
            status_code=400,
            detail=f"Question count must be between 1 and {settings.max_question_count}"
        )

    try:
        room_service.ensure_owner(db, code, user_id)
        questions, fallback_used = await generate_with_fallback(
            generator, request.subject, request.topic, request.difficulty, request.question_count
        )
        config = RoomConfig(
            subject=request.subject,
            topic=request.topic,
            difficulty=request.difficulty,
            question_count=len(questions),
            duration_seconds=request.duration_seconds
        )
        snapshot = room_service.push_quiz(db, code, questions, config)
    except QuizRoomError as e:
        raise to_http_exception(e)

    data = _room_data(snapshot)
    data["fallback_used"] = fallback_used

    return StandardResponse(
        status_code=200,
        is_success=True,
        details="Quiz generated and pushed to room",
        data=data
    )


@router.put("/{code}/quiz", response_model=StandardResponse)
async def push_quiz(
        code: str,
        request: PushQuizRequest,
        user_id: int = Depends(get_current_user_id),
        db: Session = Depends(get_db)
):
    """Push prepared questions to the room"""
    try:
        room_service.ensure_owner(db, code, user_id)
        snapshot = room_service.push_quiz(db, code, request.questions, request.config)
    except QuizRoomError as e:
        raise to_http_exception(e)

    return StandardResponse(
        status_code=200,
        is_success=True,
        details="Quiz pushed to room",
        data=_room_data(snapshot)
    )


@router.put("/{code}/progress", response_model=StandardResponse)
async def report_progress(
        code: str,
        progress: StudentProgress,
        user_id: int = Depends(get_current_user_id),
        db: Session = Depends(get_db)
):
    """Report the current user's progress in the room"""
    try:
        snapshot = room_service.report_progress(db, code, user_id, progress)
    except QuizRoomError as e:
        raise to_http_exception(e)

    return StandardResponse(
        status_code=200,
        is_success=True,
        details="Progress recorded",
        data={
            "room_id": snapshot.id,
            "status": snapshot.status.value,
            "student_progress": {
                str(key): value.model_dump() for key, value in snapshot.student_progress.items()
            }
        }
    )


@router.put("/{code}/end", response_model=StandardResponse)
async def end_session(
        code: str,
        user_id: int = Depends(get_current_user_id),
        db: Session = Depends(get_db)
):
    """End the live session"""
    try:
        room_service.ensure_owner(db, code, user_id)
        snapshot = room_service.end_session(db, code)
    except QuizRoomError as e:
        raise to_http_exception(e)

    return StandardResponse(
        status_code=200,
        is_success=True,
        details="Session ended",
        data=_room_data(snapshot)
    )


@router.get("/{code}/leaderboard", response_model=StandardResponse)
async def get_leaderboard(
        code: str,
        user_id: int = Depends(get_current_user_id),
        db: Session = Depends(get_db)
):
    """Participants ranked by score"""
    snapshot = room_service.get_room(db, code)
    if not snapshot:
        raise HTTPException(status_code=404, detail="Room not found")

    leaderboard = room_service.build_leaderboard(snapshot)

    return StandardResponse(
        status_code=200,
        is_success=True,
        details="Leaderboard retrieved successfully",
        data={
            "room_id": snapshot.id,
            "status": snapshot.status.value,
            "leaderboard": [entry.model_dump() for entry in leaderboard]
        }
    )

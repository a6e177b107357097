# app/schemas/__init__.py
"""
Pydantic schemas shared by services and routers
"""

from app.schemas.enums import Difficulty, QuestionType, RoomStatus
from app.schemas.question import Question, RawAnswer
from app.schemas.room import (
    RoomConfig,
    StudentProgress,
    ParticipantInfo,
    RoomSnapshot,
    TeacherRoomSummary,
    LeaderboardEntry
)

__all__ = [
    "Difficulty",
    "QuestionType",
    "RoomStatus",
    "Question",
    "RawAnswer",
    "RoomConfig",
    "StudentProgress",
    "ParticipantInfo",
    "RoomSnapshot",
    "TeacherRoomSummary",
    "LeaderboardEntry"
]

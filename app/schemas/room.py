# app/schemas/room.py
from datetime import datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from app.schemas.enums import Difficulty, RoomStatus
from app.schemas.question import Question


class RoomConfig(BaseModel):
    subject: str
    topic: str
    difficulty: Difficulty = Difficulty.EASY
    question_count: int = Field(ge=1)
    duration_seconds: Optional[int] = Field(default=None, ge=0)


class StudentProgress(BaseModel):
    current_question_index: int = Field(default=0, ge=0)
    completed: bool = False
    score: float = Field(default=0, ge=0)


class ParticipantInfo(BaseModel):
    id: int
    name: str


class RoomSnapshot(BaseModel):
    """Read-only view of a room as clients poll it"""

    id: str
    owner_id: int
    status: RoomStatus
    is_active: bool
    participants: List[int] = []
    config: Optional[RoomConfig] = None
    questions: Optional[List[Question]] = None
    student_progress: Dict[int, StudentProgress] = {}
    created_at: Optional[datetime] = None
    ended_at: Optional[datetime] = None
    poll_interval_seconds: int = 3


class TeacherRoomSummary(RoomSnapshot):
    """Room snapshot annotated with participant names for the history view"""

    participant_details: List[ParticipantInfo] = []


class LeaderboardEntry(BaseModel):
    rank: int
    user_id: int
    score: float
    completed: bool
    current_question_index: int

# app/schemas/enums.py
from enum import Enum


class Difficulty(str, Enum):
    """Difficulty ladder, ordered easy < medium < hard"""

    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class QuestionType(str, Enum):
    MCQ = "mcq"  # multiple choice
    TF = "tf"  # true / false
    FITB = "fitb"  # fill in the blank


class RoomStatus(str, Enum):
    WAITING = "waiting"  # created, no quiz yet
    READY = "ready"  # quiz pushed, students can play
    COMPLETED = "completed"  # owner ended the session


# Ladder order used by the difficulty advisor
DIFFICULTY_LADDER = [Difficulty.EASY, Difficulty.MEDIUM, Difficulty.HARD]

CHOICE_TYPES = {QuestionType.MCQ, QuestionType.TF}

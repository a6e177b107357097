# app/services/difficulty_service.py
from typing import Optional

from app.schemas.enums import Difficulty, DIFFICULTY_LADDER

STEP_UP_THRESHOLD = 80  # inclusive
STEP_DOWN_THRESHOLD = 40  # exclusive


def _step(difficulty: Difficulty, offset: int) -> Difficulty:
    """Move along the ladder, clamped at both ends"""
    position = DIFFICULTY_LADDER.index(difficulty) + offset
    position = max(0, min(position, len(DIFFICULTY_LADDER) - 1))
    return DIFFICULTY_LADDER[position]


def suggest_difficulty(last_score_percent: Optional[float], current_difficulty: Difficulty) -> Difficulty:
    """Suggest the difficulty of the next quiz from the last score percentage.

    No previous attempt keeps the current level; >= 80 moves one step up,
    < 40 one step down, anything in between stays put.
    """
    current_difficulty = Difficulty(current_difficulty)

    if last_score_percent is None:
        return current_difficulty
    if last_score_percent >= STEP_UP_THRESHOLD:
        return _step(current_difficulty, 1)
    if last_score_percent < STEP_DOWN_THRESHOLD:
        return _step(current_difficulty, -1)
    return current_difficulty

# app/models/__init__.py
"""
Import all models to ensure they are registered with SQLAlchemy
"""

from app.models.user import User
from app.models.room import Room, RoomParticipant, RoomProgress
from app.models.quiz import QuizSessionRecord

# Export all models
__all__ = [
    "User",
    "Room",
    "RoomParticipant",
    "RoomProgress",
    "QuizSessionRecord"
]

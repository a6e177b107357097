# app/services/__init__.py
"""
Import all services for easy access
"""

from app.services import auth_service
from app.services import difficulty_service
from app.services import email_service
from app.services import question_bank
from app.services import question_generator
from app.services import quiz_service
from app.services import room_service

# Export services
__all__ = [
    "auth_service",
    "difficulty_service",
    "email_service",
    "question_bank",
    "question_generator",
    "quiz_service",
    "room_service"
]

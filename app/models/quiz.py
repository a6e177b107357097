# app/models/quiz.py
from sqlalchemy import Column, Integer, String, DateTime, JSON, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base


class QuizSessionRecord(Base):
    """Finalized solo quiz session. Rows are only ever inserted."""
    __tablename__ = "quiz_sessions"

    id = Column(String, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # QUIZ CONFIG
    subject = Column(String, nullable=False)
    chapter = Column(String, nullable=False)
    difficulty = Column(String, nullable=False)  # easy, medium, hard

    # CONTENT
    questions = Column(JSON, nullable=False)
    responses = Column(JSON, nullable=False)

    # RESULTS
    score = Column(Integer, nullable=False, default=0)  # correct answers
    total_questions = Column(Integer, nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False)
    completed_at = Column(DateTime(timezone=True), nullable=False)

    # RELATIONSHIPS
    user = relationship("User")

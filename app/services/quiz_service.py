# app/services/quiz_service.py
import logging
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from app.core.exceptions import ConflictError, InvalidStateError, SessionNotFoundError, UserNotFoundError
from app.models.quiz import QuizSessionRecord
from app.models.user import User
from app.schemas.enums import Difficulty
from app.schemas.question import Question, RawAnswer
from app.services.difficulty_service import suggest_difficulty
from app.services.question_generator import QuestionGenerator, generate_with_fallback
from app.services.quiz_session import QuizSession

logger = logging.getLogger(__name__)


def _get_user_or_raise(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise UserNotFoundError("User not found")
    return user


async def start_quiz(db: Session, generator: QuestionGenerator, user_id: int, subject: str,
                     chapter: str, difficulty: Optional[Difficulty] = None,
                     question_count: int = 5) -> Dict:
    """Start a new solo quiz. Nothing is stored until the quiz is submitted."""
    user = _get_user_or_raise(db, user_id)
    difficulty = Difficulty(difficulty or user.last_difficulty)

    questions, fallback_used = await generate_with_fallback(
        generator, subject, chapter, difficulty, question_count
    )

    return {
        "session_id": f"s-{uuid.uuid4().hex[:12]}",
        "subject": subject,
        "chapter": chapter,
        "difficulty": difficulty,
        "questions": questions,
        "fallback_used": fallback_used,
        "created_at": datetime.now(timezone.utc)
    }


def submit_quiz(db: Session, user_id: int, session_id: str, subject: str, chapter: str,
                difficulty: Difficulty, questions: List[Question],
                responses: Dict[int, Optional[RawAnswer]],
                created_at: Optional[datetime] = None) -> Dict:
    """Score a finished quiz, store it and update the user's suggested difficulty.

    Questions are not kept server-side between start and submit, so the
    questions sent back by the client are the ones scored and stored.
    """
    user = _get_user_or_raise(db, user_id)

    if db.query(QuizSessionRecord.id).filter(QuizSessionRecord.id == session_id).first():
        raise ConflictError(f"Quiz session {session_id} was already submitted")

    unknown = [index for index in responses if not 0 <= index < len(questions)]
    if unknown:
        raise InvalidStateError(f"Responses for unknown question indexes: {sorted(unknown)}")

    session = QuizSession(
        id=session_id,
        user_id=user_id,
        subject=subject,
        chapter=chapter,
        difficulty=difficulty,
        questions=list(questions),
        created_at=created_at or datetime.now(timezone.utc)
    )
    for index in range(len(questions)):
        session.record_response(index, responses.get(index))

    next_difficulty = suggest_difficulty(session.score_percent, session.difficulty)

    record = QuizSessionRecord(
        id=session.id,
        user_id=user_id,
        subject=session.subject,
        chapter=session.chapter,
        difficulty=session.difficulty.value,
        questions=[question.model_dump(mode="json") for question in session.questions],
        responses={str(index): answer for index, answer in session.responses.items()},
        score=session.score,
        total_questions=len(session.questions),
        created_at=session.created_at,
        completed_at=session.completed_at
    )
    db.add(record)

    user.last_difficulty = next_difficulty.value
    user.total_quizzes_taken = (user.total_quizzes_taken or 0) + 1

    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise

    logger.info(
        f"🏁 User {user_id} finished {session.id}: {session.score}/{len(session.questions)} "
        f"at {session.difficulty.value}, next {next_difficulty.value}"
    )

    return {
        "session_id": session.id,
        "score": session.score,
        "total_questions": len(session.questions),
        "score_percent": session.score_percent,
        "difficulty": session.difficulty,
        "next_difficulty": next_difficulty,
        "completed_at": session.completed_at,
        "review": session.review()
    }


def _history_item(record: QuizSessionRecord) -> Dict:
    return {
        "session_id": record.id,
        "subject": record.subject,
        "chapter": record.chapter,
        "difficulty": record.difficulty,
        "score": record.score,
        "total_questions": record.total_questions,
        "created_at": record.created_at,
        "completed_at": record.completed_at
    }


def get_user_quiz_history(db: Session, user_id: int, limit: int = 20) -> List[Dict]:
    """Get user's recent quiz history"""
    records = db.query(QuizSessionRecord).filter(
        QuizSessionRecord.user_id == user_id
    ).order_by(
        QuizSessionRecord.completed_at.desc()
    ).limit(limit).all()

    return [_history_item(record) for record in records]


def get_quiz_session_review(db: Session, user_id: int, session_id: str) -> Dict:
    """Stored session with its per-question breakdown"""
    record = db.query(QuizSessionRecord).filter(
        QuizSessionRecord.id == session_id,
        QuizSessionRecord.user_id == user_id
    ).first()
    if not record:
        raise SessionNotFoundError(f"Quiz session {session_id} not found")

    session = QuizSession(
        id=record.id,
        user_id=record.user_id,
        subject=record.subject,
        chapter=record.chapter,
        difficulty=record.difficulty,
        questions=[Question(**question) for question in record.questions],
        responses={int(index): answer for index, answer in record.responses.items()},
        score=record.score,
        created_at=record.created_at,
        completed_at=record.completed_at
    )

    return {
        **_history_item(record),
        "score_percent": session.score_percent,
        "review": session.review()
    }


def get_dashboard_stats(db: Session, user_id: int) -> Dict:
    """Totals, average score and recent activity for the dashboard"""
    user = _get_user_or_raise(db, user_id)

    records = db.query(QuizSessionRecord).filter(
        QuizSessionRecord.user_id == user_id
    ).order_by(
        QuizSessionRecord.completed_at.desc()
    ).all()

    total = len(records)
    average = (
        sum(record.score / record.total_questions for record in records if record.total_questions) / total
        if total > 0 else 0
    )

    subjects = []
    for record in records:
        if record.subject not in subjects:
            subjects.append(record.subject)

    return {
        "total_quizzes": total,
        "average_score": round(average * 100),
        "mastered_subjects": subjects[:3],
        "recent_sessions": [_history_item(record) for record in records[:5]],
        "suggested_difficulty": Difficulty(user.last_difficulty)
    }

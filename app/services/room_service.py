# app/services/room_service.py
"""
Room lifecycle: waiting -> ready -> completed.

Every function takes the SQLAlchemy session it should work in. The room row
holds status, config and questions; membership and progress live in their own
tables with one row per (room, user), so writes for different students never
touch the same row.
"""

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import settings
from app.core.exceptions import (
    ConflictError,
    InvalidStateError,
    PermissionDeniedError,
    RoomNotFoundError,
    UpstreamUnavailableError,
    UserNotFoundError
)
from app.core.utils import generate_room_code
from app.models.room import Room, RoomParticipant, RoomProgress
from app.models.user import User
from app.schemas.enums import RoomStatus
from app.schemas.question import Question
from app.schemas.room import (
    LeaderboardEntry,
    ParticipantInfo,
    RoomConfig,
    RoomSnapshot,
    StudentProgress,
    TeacherRoomSummary
)

logger = logging.getLogger(__name__)

# Upsert attempts before giving up on a contended progress row
PROGRESS_UPSERT_ATTEMPTS = 3


# ================================
# HELPERS
# ================================

def _commit(db: Session, action: str) -> None:
    """Commit or roll back; store failures become UpstreamUnavailableError"""
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Store error while {action}: {str(e)}")
        raise UpstreamUnavailableError(f"Store unavailable while {action}") from e


def _get_room_or_raise(db: Session, code: str) -> Room:
    room = db.query(Room).filter(Room.id == code).first()
    if not room:
        raise RoomNotFoundError(code)
    return room


def _progress_map(room: Room) -> dict:
    return {
        entry.user_id: StudentProgress(
            current_question_index=entry.current_question_index,
            completed=entry.completed,
            score=entry.score
        )
        for entry in room.progress_entries
    }


def to_snapshot(room: Room) -> RoomSnapshot:
    """Build the read-only view clients poll"""
    return RoomSnapshot(
        id=room.id,
        owner_id=room.owner_id,
        status=RoomStatus(room.status),
        is_active=bool(room.is_active),
        participants=[participant.user_id for participant in room.participants],
        config=RoomConfig(**room.config) if room.config else None,
        questions=[Question(**q) for q in room.questions] if room.questions else None,
        student_progress=_progress_map(room),
        created_at=room.created_at,
        ended_at=room.ended_at,
        poll_interval_seconds=settings.poll_interval_seconds
    )


def to_teacher_summary(room: Room) -> TeacherRoomSummary:
    snapshot = to_snapshot(room)
    details = [
        ParticipantInfo(
            id=participant.user_id,
            name=participant.user.name if participant.user else "Unknown"
        )
        for participant in room.participants
    ]
    return TeacherRoomSummary(**snapshot.model_dump(), participant_details=details)


# ================================
# ROOM OPERATIONS
# ================================

def create_room(db: Session, owner_id: int,
                code_generator: Callable[[], str] = generate_room_code) -> RoomSnapshot:
    """Create a waiting room under a fresh 6-digit code"""
    if not db.query(User.id).filter(User.id == owner_id).first():
        raise UserNotFoundError(f"User {owner_id} not found")

    for attempt in range(settings.room_code_max_attempts):
        code = code_generator()

        try:
            if db.query(Room.id).filter(Room.id == code).first():
                logger.debug(f"Room code {code} already taken, drawing again")
                continue

            room = Room(
                id=code,
                owner_id=owner_id,
                status=RoomStatus.WAITING.value,
                is_active=True
            )
            db.add(room)
            _commit(db, "creating room")
        except IntegrityError:
            # Another request inserted the same code between our check and insert
            logger.warning(f"⚠️ Room code {code} collided on insert, retrying")
            continue
        except SQLAlchemyError as e:
            db.rollback()
            logger.error(f"❌ Store error while creating room: {str(e)}")
            raise UpstreamUnavailableError("Store unavailable while creating room") from e

        db.refresh(room)
        logger.info(f"✅ Room {code} created by user {owner_id}")
        return to_snapshot(room)

    raise ConflictError(
        f"Could not allocate a unique room code after {settings.room_code_max_attempts} attempts"
    )


def join_room(db: Session, code: str, user_id: int) -> RoomSnapshot:
    """Add a student to the room; joining again changes nothing"""
    room = _get_room_or_raise(db, code)

    already_joined = db.query(RoomParticipant).filter(
        RoomParticipant.room_id == code,
        RoomParticipant.user_id == user_id
    ).first()

    if not already_joined:
        db.add(RoomParticipant(room_id=code, user_id=user_id))
        try:
            _commit(db, "joining room")
            logger.info(f"👥 User {user_id} joined room {code}")
        except IntegrityError:
            # Concurrent duplicate join; membership already exists
            pass

    if room.status == RoomStatus.COMPLETED.value:
        logger.info(f"User {user_id} joined room {code} after it was completed")

    db.refresh(room)
    return to_snapshot(room)


def push_quiz(db: Session, code: str, questions: List[Question], config: RoomConfig) -> RoomSnapshot:
    """Attach the quiz to the room and mark it ready.

    Pushing again overwrites questions and config; student progress is kept.
    """
    room = _get_room_or_raise(db, code)

    if room.status == RoomStatus.COMPLETED.value:
        raise InvalidStateError(f"Room {code} is completed; cannot push a new quiz")
    if not questions:
        raise InvalidStateError("Cannot push an empty quiz")
    if len(questions) > settings.max_question_count:
        raise InvalidStateError(f"A quiz can have at most {settings.max_question_count} questions")
    if config.question_count != len(questions):
        raise InvalidStateError(
            f"Config announces {config.question_count} questions but {len(questions)} were pushed"
        )

    was_ready = room.status == RoomStatus.READY.value
    room.questions = [question.model_dump(mode="json") for question in questions]
    room.config = config.model_dump(mode="json")
    room.status = RoomStatus.READY.value
    _commit(db, "pushing quiz")

    db.refresh(room)
    logger.info(
        f"📝 Quiz {'re-pushed' if was_ready else 'pushed'} to room {code} "
        f"({len(questions)} questions, {config.difficulty.value})"
    )
    return to_snapshot(room)


def report_progress(db: Session, code: str, user_id: int, progress: StudentProgress) -> RoomSnapshot:
    """Upsert one student's progress entry; last write wins per student"""
    room = _get_room_or_raise(db, code)

    if room.status == RoomStatus.COMPLETED.value:
        logger.warning(f"⚠️ Ignoring progress from user {user_id} for completed room {code}")
        return to_snapshot(room)

    values = progress.model_dump()

    for attempt in range(PROGRESS_UPSERT_ATTEMPTS):
        entry = db.query(RoomProgress).filter(
            RoomProgress.room_id == code,
            RoomProgress.user_id == user_id
        ).first()

        if entry:
            for key, value in values.items():
                setattr(entry, key, value)
        else:
            db.add(RoomProgress(room_id=code, user_id=user_id, **values))

        try:
            _commit(db, "reporting progress")
            break
        except IntegrityError:
            # Lost the insert race for this key; next pass updates the winner's row
            logger.debug(f"Progress insert race for user {user_id} in room {code}, retrying")
    else:
        raise UpstreamUnavailableError(f"Could not record progress for user {user_id} in room {code}")

    db.refresh(room)
    return to_snapshot(room)


def end_session(db: Session, code: str) -> RoomSnapshot:
    """Close the room for good; progress stays readable"""
    room = _get_room_or_raise(db, code)

    if room.status == RoomStatus.COMPLETED.value:
        return to_snapshot(room)

    room.is_active = False
    room.status = RoomStatus.COMPLETED.value
    room.ended_at = datetime.now(timezone.utc)
    _commit(db, "ending session")

    db.refresh(room)
    logger.info(f"🏁 Room {code} completed with {len(room.participants)} participants")
    return to_snapshot(room)


def get_room(db: Session, code: str) -> Optional[RoomSnapshot]:
    room = db.query(Room).filter(Room.id == code).first()
    return to_snapshot(room) if room else None


def get_teacher_rooms(db: Session, owner_id: int) -> List[TeacherRoomSummary]:
    """All rooms of a teacher, newest first"""
    rooms = db.query(Room).filter(
        Room.owner_id == owner_id
    ).order_by(
        Room.created_at.desc()
    ).all()

    return [to_teacher_summary(room) for room in rooms]


def ensure_owner(db: Session, code: str, user_id: int) -> None:
    """Raise unless the user owns the room"""
    room = _get_room_or_raise(db, code)
    if room.owner_id != user_id:
        raise PermissionDeniedError("Only the room owner can do this")


# ================================
# LEADERBOARD
# ================================

def build_leaderboard(snapshot: RoomSnapshot) -> List[LeaderboardEntry]:
    """Rank everyone in the room by score, highest first.

    Participants without a progress entry count as score 0. Equal scores
    keep join order.
    """
    user_ids = list(snapshot.participants)
    user_ids += [user_id for user_id in snapshot.student_progress if user_id not in user_ids]

    rows = [(user_id, snapshot.student_progress.get(user_id) or StudentProgress()) for user_id in user_ids]
    rows.sort(key=lambda row: row[1].score, reverse=True)

    return [
        LeaderboardEntry(
            rank=position,
            user_id=user_id,
            score=progress.score,
            completed=progress.completed,
            current_question_index=progress.current_question_index
        )
        for position, (user_id, progress) in enumerate(rows, start=1)
    ]

# app/models/room.py
from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Boolean, DateTime, Float, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Room(Base):
    __tablename__ = "rooms"

    # 6-digit join code doubles as the primary key
    id = Column(String(6), primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # LIFECYCLE
    status = Column(String, nullable=False, default="waiting")  # waiting, ready, completed
    is_active = Column(Boolean, nullable=False, default=True)

    # QUIZ (set by push_quiz)
    config = Column(JSON, nullable=True)
    questions = Column(JSON, nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    ended_at = Column(DateTime(timezone=True), nullable=True)

    # RELATIONSHIPS
    owner = relationship("User")
    participants = relationship(
        "RoomParticipant",
        back_populates="room",
        cascade="all, delete-orphan",
        order_by="RoomParticipant.id"
    )
    progress_entries = relationship(
        "RoomProgress",
        back_populates="room",
        cascade="all, delete-orphan",
        order_by="RoomProgress.id"
    )


class RoomParticipant(Base):
    __tablename__ = "room_participants"

    id = Column(Integer, primary_key=True, index=True)
    room_id = Column(String(6), ForeignKey("rooms.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    joined_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    # RELATIONSHIPS
    room = relationship("Room", back_populates="participants")
    user = relationship("User")

    # UNIQUE CONSTRAINT - joining twice is a no-op
    __table_args__ = (UniqueConstraint('room_id', 'user_id', name='_unique_participant'),)


class RoomProgress(Base):
    __tablename__ = "room_progress"

    id = Column(Integer, primary_key=True, index=True)
    room_id = Column(String(6), ForeignKey("rooms.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)

    current_question_index = Column(Integer, nullable=False, default=0)
    completed = Column(Boolean, nullable=False, default=False)
    score = Column(Float, nullable=False, default=0.0)

    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    # RELATIONSHIPS
    room = relationship("Room", back_populates="progress_entries")

    # UNIQUE CONSTRAINT - one progress row per student per room
    __table_args__ = (UniqueConstraint('room_id', 'user_id', name='_unique_progress'),)

# =============================================================================
# Shared fixtures: in-memory database, fake collaborators, API client
# =============================================================================

import os

# Must be set before app.config is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["GEMINI_API_KEY"] = ""
os.environ["SMTP_USERNAME"] = ""
os.environ["SMTP_PASSWORD"] = ""

from datetime import datetime  # noqa: E402
from typing import List  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.database import Base, get_db  # noqa: E402
from app import models  # noqa: E402,F401
from app.core.exceptions import UpstreamUnavailableError  # noqa: E402
from app.core.security import create_access_token  # noqa: E402
from app.models.user import User  # noqa: E402
from app.schemas import Difficulty, Question, QuestionType  # noqa: E402
from app.services.email_service import EmailResult  # noqa: E402


# =============================================================================
# FAKE COLLABORATORS
# =============================================================================


class FakeQuestionGenerator:
    """Returns canned questions or fails like an unavailable upstream"""

    def __init__(self, questions: List[Question] | None = None, fail: bool = False):
        self.questions = questions
        self.fail = fail
        self.calls = []

    async def generate(self, subject, topic, difficulty, count):
        self.calls.append((subject, topic, difficulty, count))
        if self.fail:
            raise UpstreamUnavailableError("generator down")
        return (self.questions or make_questions(count))[:count]


class FakeEmailService:
    def __init__(self):
        self.sent = []

    async def send_password_reset_email(self, email, reset_link):
        self.sent.append((email, reset_link))
        return EmailResult(success=True, message="Email sent", timestamp=datetime.now())


def make_questions(count: int = 3) -> List[Question]:
    """mcq, tf, fitb repeating; correct answers are 1, 0 and 'mitochondria'"""
    templates = [
        dict(type=QuestionType.MCQ, text="Pick B", options=["A", "B", "C", "D"],
             correct_answer_index=1, explanation="B it is"),
        dict(type=QuestionType.TF, text="Sky is blue", options=["True", "False"],
             correct_answer_index=0, explanation="Rayleigh scattering"),
        dict(type=QuestionType.FITB, text="Powerhouse of the cell is the ____",
             correct_answer_text="mitochondria", explanation="Biology"),
    ]
    return [Question(id=f"q-{i}", **templates[i % len(templates)]) for i in range(count)]


# =============================================================================
# DATABASE FIXTURES
# =============================================================================


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def make_user(db_session):
    """Create users without going through password hashing"""
    counter = {"n": 0}

    def _make_user(name: str = None, difficulty: Difficulty = Difficulty.EASY) -> User:
        counter["n"] += 1
        user = User(
            email=f"user{counter['n']}@example.com",
            password="not-a-real-hash",
            name=name or f"User {counter['n']}",
            last_difficulty=difficulty.value
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def teacher(make_user):
    return make_user("Teacher")


@pytest.fixture
def sample_questions():
    return make_questions(3)


# =============================================================================
# API FIXTURES
# =============================================================================


@pytest.fixture
def fake_generator():
    return FakeQuestionGenerator()


@pytest.fixture
def fake_email_service():
    return FakeEmailService()


@pytest.fixture
def client(session_factory, fake_generator, fake_email_service):
    """TestClient bound to the in-memory database and fake collaborators"""
    from fastapi.testclient import TestClient
    from app.main import app
    from app.api.dependencies import get_email_service, get_question_generator

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_question_generator] = lambda: fake_generator
    app.dependency_overrides[get_email_service] = lambda: fake_email_service

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers

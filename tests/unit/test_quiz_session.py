# =============================================================================
# Solo quiz session scoring
# =============================================================================

import pytest

from app.core.exceptions import InvalidStateError
from app.schemas import Difficulty
from app.services.quiz_session import QuizSession

from tests.conftest import make_questions


@pytest.fixture
def session():
    return QuizSession(
        id="s-1",
        user_id=1,
        subject="Science",
        chapter="Cells",
        difficulty=Difficulty.MEDIUM,
        questions=make_questions(3)
    )


class TestRecordResponse:
    def test_correct_answer_increments_score(self, session):
        session.record_response(0, 1)
        assert session.score == 1
        assert session.responses == {0: 1}

    def test_wrong_answer_keeps_score(self, session):
        session.record_response(0, 3)
        assert session.score == 0
        assert session.responses == {0: 3}

    def test_score_never_decreases(self, session):
        scores = []
        for index, answer in enumerate([1, 1, "mitochondria"]):
            session.record_response(index, answer)
            scores.append(session.score)
        assert scores == sorted(scores)
        assert session.score == 2

    def test_returns_the_session(self, session):
        assert session.record_response(0, 1) is session

    def test_out_of_order_is_rejected(self, session):
        with pytest.raises(InvalidStateError):
            session.record_response(1, 0)

    def test_none_response_is_rejected(self, session):
        with pytest.raises(InvalidStateError):
            session.record_response(0, None)
        assert session.responses == {}


class TestFinalization:
    def test_not_completed_before_last_answer(self, session):
        session.record_response(0, 1)
        session.record_response(1, 0)
        assert session.completed_at is None
        assert not session.is_completed

    def test_last_answer_sets_completed_at(self, session):
        for index, answer in enumerate([1, 0, " Mitochondria "]):
            session.record_response(index, answer)
        assert session.completed_at is not None
        assert session.score == 3
        assert session.score_percent == 100.0

    def test_completed_session_is_immutable(self, session):
        for index, answer in enumerate([1, 0, "x"]):
            session.record_response(index, answer)
        completed_at = session.completed_at

        with pytest.raises(InvalidStateError):
            session.record_response(2, "mitochondria")

        assert session.completed_at == completed_at
        assert session.score == 2

    def test_finalize_with_unanswered_questions(self, session):
        session.record_response(0, 1)
        with pytest.raises(InvalidStateError):
            session.finalize()
        assert session.completed_at is None

    def test_finalize_twice_is_rejected(self, session):
        for index, answer in enumerate([1, 0, "mitochondria"]):
            session.record_response(index, answer)
        with pytest.raises(InvalidStateError):
            session.finalize()

    def test_empty_session_is_rejected(self):
        with pytest.raises(InvalidStateError):
            QuizSession(id="s", user_id=1, subject="x", chapter="y",
                        difficulty=Difficulty.EASY, questions=[])


class TestReview:
    def test_review_marks_each_answer(self, session):
        for index, answer in enumerate([1, 1, "mitochondria"]):
            session.record_response(index, answer)

        review = session.review()

        assert [item["is_correct"] for item in review] == [True, False, True]
        assert review[2]["correct_answer_text"] == "mitochondria"

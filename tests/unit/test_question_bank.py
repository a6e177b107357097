# =============================================================================
# Fallback question bank
# =============================================================================

from app.schemas import Question
from app.services.question_bank import STATIC_QUESTION_BANK, get_fallback_questions


class TestFallbackQuestions:
    def test_returns_requested_count(self):
        questions = get_fallback_questions(5)
        assert len(questions) == 5
        assert all(isinstance(q, Question) for q in questions)

    def test_ids_are_unique(self):
        questions = get_fallback_questions(5)
        assert len({q.id for q in questions}) == 5

    def test_cycles_when_count_exceeds_pool(self):
        count = len(STATIC_QUESTION_BANK) * 2 + 1
        questions = get_fallback_questions(count)
        assert len(questions) == count
        assert len({q.id for q in questions}) == count

    def test_prefers_subject_when_enough_questions(self):
        questions = get_fallback_questions(2, subject="mathematics")
        math_texts = {e["text"] for e in STATIC_QUESTION_BANK if e["subject"] == "Mathematics"}
        assert {q.text for q in questions} <= math_texts

    def test_unknown_subject_uses_whole_bank(self):
        assert len(get_fallback_questions(4, subject="Astrology")) == 4

    def test_zero_count(self):
        assert get_fallback_questions(0) == []

# app/services/quiz_session.py
"""In-memory state of one solo quiz attempt and its scoring rules."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, List, Optional

from app.core.exceptions import InvalidStateError
from app.core.utils import calculate_quiz_score
from app.schemas.enums import Difficulty
from app.schemas.question import Question, RawAnswer


@dataclass
class QuizSession:
    """One user's attempt at one quiz.

    Attributes:
        id: Session id chosen at quiz start
        user_id: Owner of the attempt
        subject: Subject the questions were generated for
        chapter: Chapter or topic inside the subject
        difficulty: Difficulty the quiz was generated at
        questions: Questions in play order, fixed at creation
        responses: Raw answers keyed by question index
        score: Number of correct responses so far
        created_at: When the quiz started
        completed_at: Set once, when the last question is answered
    """

    id: str
    user_id: int
    subject: str
    chapter: str
    difficulty: Difficulty
    questions: List[Question]
    responses: Dict[int, RawAnswer] = field(default_factory=dict)
    score: int = 0
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    completed_at: Optional[datetime] = None

    def __post_init__(self) -> None:
        if not self.questions:
            raise InvalidStateError("A quiz session needs at least one question")
        self.difficulty = Difficulty(self.difficulty)

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    @property
    def next_index(self) -> int:
        """Index of the first unanswered question"""
        return len(self.responses)

    @property
    def score_percent(self) -> float:
        return calculate_quiz_score(self.score, len(self.questions))

    def record_response(self, question_index: int, raw_answer: Optional[RawAnswer]) -> "QuizSession":
        """Store the answer to the current question and update the score.

        Answering the last question finalizes the session; after that the
        session rejects further writes.
        """
        if self.is_completed:
            raise InvalidStateError(f"Quiz session {self.id} is already completed")
        if question_index != self.next_index:
            raise InvalidStateError(
                f"Expected an answer for question {self.next_index}, got {question_index}"
            )
        if raw_answer is None:
            raise InvalidStateError(f"Question {question_index} has no response")

        question = self.questions[question_index]
        self.responses[question_index] = raw_answer
        if question.is_correct(raw_answer):
            self.score += 1

        if question_index == len(self.questions) - 1:
            self.finalize()
        return self

    def finalize(self) -> None:
        if self.is_completed:
            raise InvalidStateError(f"Quiz session {self.id} is already completed")
        missing = [i for i in range(len(self.questions)) if self.responses.get(i) is None]
        if missing:
            raise InvalidStateError(f"Cannot finish quiz with unanswered questions: {missing}")
        self.completed_at = datetime.now(timezone.utc)

    def review(self) -> List[dict]:
        """Per-question breakdown shown after scoring"""
        return [
            {
                "index": index,
                "question_id": question.id,
                "text": question.text,
                "user_answer": self.responses.get(index),
                "is_correct": question.is_correct(self.responses.get(index)),
                "correct_answer_index": question.correct_answer_index,
                "correct_answer_text": question.correct_answer_text,
                "explanation": question.explanation
            }
            for index, question in enumerate(self.questions)
        ]

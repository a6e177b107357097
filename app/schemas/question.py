# app/schemas/question.py
from typing import Any, Callable, Dict, List, Optional, Union
from pydantic import BaseModel, ConfigDict, model_validator

from app.schemas.enums import QuestionType, CHOICE_TYPES

# Option index for choice questions, free text for fill-in-the-blank
RawAnswer = Union[int, str]

TRUE_FALSE_OPTIONS = ["True", "False"]


class Question(BaseModel):
    """Immutable quiz question.

    Choice questions (mcq, tf) are scored against ``correct_answer_index``,
    fill-in-the-blank questions against ``correct_answer_text``. The fields
    that do not apply to the question type are dropped on construction.
    """

    model_config = ConfigDict(frozen=True)

    id: str
    type: QuestionType
    text: str
    options: Optional[List[str]] = None
    correct_answer_index: Optional[int] = None
    correct_answer_text: Optional[str] = None
    explanation: str = ""

    @model_validator(mode="before")
    @classmethod
    def drop_unused_answer_fields(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        data = dict(data)
        question_type = data.get("type")
        if question_type in (QuestionType.FITB, QuestionType.FITB.value):
            data["options"] = None
            data["correct_answer_index"] = None
        elif question_type in (QuestionType.MCQ, QuestionType.MCQ.value,
                               QuestionType.TF, QuestionType.TF.value):
            data["correct_answer_text"] = None
            if question_type in (QuestionType.TF, QuestionType.TF.value) and not data.get("options"):
                data["options"] = list(TRUE_FALSE_OPTIONS)
        return data

    @model_validator(mode="after")
    def check_choice_answer(self) -> "Question":
        if self.type in CHOICE_TYPES:
            if not self.options:
                raise ValueError(f"{self.type.value} question needs options")
            index = self.correct_answer_index
            if index is None or not 0 <= index < len(self.options):
                raise ValueError("correct_answer_index must point into options")
        return self

    def is_correct(self, raw_answer: Optional[RawAnswer]) -> bool:
        """Check a raw answer with the strategy registered for this question type"""
        return ANSWER_CHECKERS[self.type](self, raw_answer)


def _check_choice(question: Question, raw_answer: Optional[RawAnswer]) -> bool:
    # bool is an int subclass; True must not match index 1
    if raw_answer is None or isinstance(raw_answer, bool) or not isinstance(raw_answer, int):
        return False
    return raw_answer == question.correct_answer_index


def _check_text(question: Question, raw_answer: Optional[RawAnswer]) -> bool:
    if raw_answer is None:
        return False
    expected = (question.correct_answer_text or "").strip().lower()
    return str(raw_answer).strip().lower() == expected


ANSWER_CHECKERS: Dict[QuestionType, Callable[[Question, Optional[RawAnswer]], bool]] = {
    QuestionType.MCQ: _check_choice,
    QuestionType.TF: _check_choice,
    QuestionType.FITB: _check_text,
}

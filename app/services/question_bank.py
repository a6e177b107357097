# app/services/question_bank.py
"""Static questions served when the generator is unavailable."""

import random
import time
from typing import List, Optional

from app.schemas.enums import QuestionType
from app.schemas.question import Question

STATIC_QUESTION_BANK: List[dict] = [
    {
        "id": "static-1",
        "subject": "Geography",
        "type": QuestionType.MCQ,
        "text": "What is the capital of France?",
        "options": ["London", "Berlin", "Paris", "Madrid"],
        "correct_answer_index": 2,
        "explanation": "Paris is the capital and most populous city of France."
    },
    {
        "id": "static-2",
        "subject": "Science",
        "type": QuestionType.TF,
        "text": "Water boils at 100 degrees Celsius at sea level.",
        "options": ["True", "False"],
        "correct_answer_index": 0,
        "explanation": "This is a standard physical property of water."
    },
    {
        "id": "static-3",
        "subject": "Science",
        "type": QuestionType.FITB,
        "text": "The powerhouse of the cell is the ____.",
        "correct_answer_text": "mitochondria",
        "explanation": "Mitochondria generate most of the chemical energy needed to power the cell's biochemical reactions."
    },
    {
        "id": "static-4",
        "subject": "Mathematics",
        "type": QuestionType.MCQ,
        "text": "What is the value of 7 x 8?",
        "options": ["54", "56", "64", "48"],
        "correct_answer_index": 1,
        "explanation": "7 multiplied by 8 equals 56."
    },
    {
        "id": "static-5",
        "subject": "Mathematics",
        "type": QuestionType.TF,
        "text": "Every prime number is odd.",
        "options": ["True", "False"],
        "correct_answer_index": 1,
        "explanation": "2 is prime and even."
    },
    {
        "id": "static-6",
        "subject": "Mathematics",
        "type": QuestionType.FITB,
        "text": "The square root of 81 is ____.",
        "correct_answer_text": "9",
        "explanation": "9 x 9 = 81."
    },
    {
        "id": "static-7",
        "subject": "History",
        "type": QuestionType.MCQ,
        "text": "In which year did World War II end?",
        "options": ["1943", "1944", "1945", "1946"],
        "correct_answer_index": 2,
        "explanation": "The war ended in 1945 with the surrender of Germany in May and Japan in September."
    },
    {
        "id": "static-8",
        "subject": "History",
        "type": QuestionType.TF,
        "text": "The Great Wall of China was built during a single dynasty.",
        "options": ["True", "False"],
        "correct_answer_index": 1,
        "explanation": "It was built and rebuilt over many dynasties, most famously the Ming."
    },
    {
        "id": "static-9",
        "subject": "Computer Science",
        "type": QuestionType.MCQ,
        "text": "Which data structure works on a first-in, first-out basis?",
        "options": ["Stack", "Queue", "Tree", "Graph"],
        "correct_answer_index": 1,
        "explanation": "A queue removes elements in the order they were added."
    },
    {
        "id": "static-10",
        "subject": "Computer Science",
        "type": QuestionType.FITB,
        "text": "The binary representation of decimal 5 is ____.",
        "correct_answer_text": "101",
        "explanation": "5 = 4 + 1 = 1*2^2 + 0*2^1 + 1*2^0."
    },
    {
        "id": "static-11",
        "subject": "Literature",
        "type": QuestionType.MCQ,
        "text": "Who wrote 'Romeo and Juliet'?",
        "options": ["Charles Dickens", "William Shakespeare", "Jane Austen", "Mark Twain"],
        "correct_answer_index": 1,
        "explanation": "The play was written by William Shakespeare in the 1590s."
    },
    {
        "id": "static-12",
        "subject": "Geography",
        "type": QuestionType.FITB,
        "text": "The longest river in Africa is the ____.",
        "correct_answer_text": "Nile",
        "explanation": "The Nile flows about 6,650 km through northeastern Africa."
    },
]


def _to_question(entry: dict, question_id: str) -> Question:
    data = {key: value for key, value in entry.items() if key != "subject"}
    data["id"] = question_id
    return Question(**data)


def get_fallback_questions(count: int, subject: Optional[str] = None) -> List[Question]:
    """Pick ``count`` shuffled questions from the static bank.

    Questions matching ``subject`` are used when there are enough of them;
    otherwise the whole bank is used. If ``count`` exceeds the pool the
    shuffled pool is repeated, and repeats get fresh ids.
    """
    if count < 1:
        return []

    pool = STATIC_QUESTION_BANK
    if subject:
        matching = [entry for entry in pool if entry["subject"].lower() == subject.strip().lower()]
        if len(matching) >= count:
            pool = matching

    stamp = int(time.time() * 1000)
    questions = []
    while len(questions) < count:
        batch = random.sample(pool, len(pool))
        for entry in batch[:count - len(questions)]:
            cycle = len(questions) // len(pool)
            question_id = entry["id"] if cycle == 0 else f"{entry['id']}-{stamp}-{len(questions)}"
            questions.append(_to_question(entry, question_id))
    return questions

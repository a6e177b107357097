# app/services/question_generator.py
"""
Question generation through the Gemini REST API.

Rate-limited calls (HTTP 429) are retried with exponential backoff; every
other failure is raised as UpstreamUnavailableError right away so callers
can fall back to the static question bank.
"""

import json
import logging
import time
from typing import List, Optional, Tuple

import httpx
from pydantic import ValidationError

from app.config import Settings, settings
from app.core.exceptions import RateLimitedError, UpstreamUnavailableError
from app.core.utils import retry_on_failure
from app.schemas.enums import Difficulty
from app.schemas.question import Question
from app.services.question_bank import get_fallback_questions

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """Generate {count} mixed-format questions for the subject "{subject}", chapter "{topic}".
Difficulty: "{difficulty}".
Provide a mix of these types:
1. "mcq": Multiple choice with 4 options.
2. "tf": True or False question.
3. "fitb": Fill in the blank (short answer).

Each "mcq" and "tf" must have a "correct_answer_index".
Each "fitb" must have a "correct_answer_text".
Include an explanation for all questions."""

RESPONSE_SCHEMA = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "type": {"type": "STRING", "enum": ["mcq", "tf", "fitb"]},
            "text": {"type": "STRING"},
            "options": {"type": "ARRAY", "items": {"type": "STRING"}},
            "correct_answer_index": {"type": "INTEGER"},
            "correct_answer_text": {"type": "STRING"},
            "explanation": {"type": "STRING"}
        },
        "required": ["type", "text", "explanation"]
    }
}


def strip_code_fence(raw: str) -> str:
    """Remove a surrounding ```json fence if the model added one"""
    text = raw.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


class QuestionGenerator:
    """Generates quiz questions with an LLM"""

    def __init__(
            self,
            api_key: str,
            model: str = "gemini-1.5-flash",
            base_url: str = "https://generativelanguage.googleapis.com/v1beta",
            timeout: float = 60.0,
            max_retries: int = 3,
            retry_delay: float = 1.0,
            transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self._transport = transport

    @classmethod
    def from_settings(cls, config: Settings = settings) -> "QuestionGenerator":
        return cls(
            api_key=config.gemini_api_key,
            model=config.gemini_model,
            base_url=config.gemini_base_url,
            timeout=config.generation_timeout_seconds,
            max_retries=config.generation_max_retries,
            retry_delay=config.generation_retry_delay
        )

    async def generate(self, subject: str, topic: str, difficulty: Difficulty, count: int) -> List[Question]:
        """Generate ``count`` questions or raise UpstreamUnavailableError"""
        if not self.api_key:
            raise UpstreamUnavailableError("Question generator is not configured")

        payload = {
            "contents": [{
                "parts": [{
                    "text": PROMPT_TEMPLATE.format(
                        count=count,
                        subject=subject,
                        topic=topic,
                        difficulty=Difficulty(difficulty).value
                    )
                }]
            }],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": RESPONSE_SCHEMA
            }
        }

        request = retry_on_failure(
            max_retries=self.max_retries,
            delay=self.retry_delay,
            retry_on=(RateLimitedError,)
        )(self._request)

        body = await request(payload)
        questions = self._parse(body)[:count]
        logger.info(f"🧠 Generated {len(questions)} questions for {subject} / {topic} ({difficulty})")
        return questions

    async def _request(self, payload: dict) -> dict:
        url = f"{self.base_url}/models/{self.model}:generateContent"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(url, params={"key": self.api_key}, json=payload)
        except httpx.HTTPError as e:
            raise UpstreamUnavailableError(f"Question generator unreachable: {str(e)}") from e

        if response.status_code == 429:
            raise RateLimitedError("Question generator rate limit reached")
        if response.status_code >= 400:
            raise UpstreamUnavailableError(
                f"Question generator returned HTTP {response.status_code}"
            )

        try:
            return response.json()
        except ValueError as e:
            raise UpstreamUnavailableError("Question generator returned invalid JSON") from e

    def _parse(self, body: dict) -> List[Question]:
        try:
            raw = body["candidates"][0]["content"]["parts"][0]["text"]
            items = json.loads(strip_code_fence(raw))
        except (KeyError, IndexError, TypeError, ValueError) as e:
            logger.error(f"❌ Failed to parse generator response: {str(e)}")
            raise UpstreamUnavailableError("The AI returned an invalid response format") from e

        if not isinstance(items, list) or not items:
            raise UpstreamUnavailableError("The AI returned no questions")

        stamp = int(time.time() * 1000)
        questions = []
        for index, item in enumerate(items):
            try:
                questions.append(Question(**{**item, "id": f"q-{stamp}-{index}"}))
            except (ValidationError, TypeError) as e:
                logger.warning(f"⚠️ Skipping malformed generated question {index}: {str(e)}")

        if not questions:
            raise UpstreamUnavailableError("The AI returned no usable questions")
        return questions


async def generate_with_fallback(
        generator: QuestionGenerator,
        subject: str,
        topic: str,
        difficulty: Difficulty,
        count: int
) -> Tuple[List[Question], bool]:
    """Generate questions, substituting the static bank on failure.

    Always returns exactly ``count`` questions: a short generated batch is
    topped up from the bank. The flag tells whether the bank was used.
    """
    try:
        questions = await generator.generate(subject, topic, difficulty, count)
    except UpstreamUnavailableError as e:
        logger.warning(f"⚠️ Question generation failed ({e.message}); using fallback bank")
        return get_fallback_questions(count, subject), True

    missing = count - len(questions)
    if missing <= 0:
        return questions[:count], False

    logger.warning(f"⚠️ Generator returned {len(questions)}/{count} questions; filling {missing} from fallback bank")
    return questions + get_fallback_questions(missing, subject), True

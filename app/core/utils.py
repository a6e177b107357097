# app/core/utils.py
import asyncio
import logging
import random
import secrets
import string
from functools import wraps
from typing import Tuple, Type

logger = logging.getLogger(__name__)


def generate_room_code() -> str:
    """Generate a 6-digit numeric room code (000000-999999)"""
    return ''.join(random.choices(string.digits, k=6))


def generate_reset_token() -> str:
    """Generate a URL-safe password reset token"""
    return secrets.token_hex(32)


def calculate_quiz_score(correct_answers: int, total_questions: int) -> float:
    """Calculate quiz score as percentage"""
    if total_questions == 0:
        return 0.0
    return round((correct_answers / total_questions) * 100, 1)


def retry_on_failure(max_retries: int = 3, delay: float = 1.0, backoff: float = 2.0,
                     retry_on: Tuple[Type[BaseException], ...] = (Exception,)):
    """Decorator for retry logic with exponential backoff.

    Only exceptions listed in ``retry_on`` are retried; anything else
    propagates on the first attempt.
    """

    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            current_delay = delay

            for attempt in range(max_retries):
                try:
                    return await func(*args, **kwargs)
                except retry_on as e:
                    if attempt == max_retries - 1:
                        logger.error(f"All {max_retries} attempts of {func.__name__} failed")
                        raise
                    logger.warning(
                        f"Attempt {attempt + 1} of {func.__name__} failed: {str(e)}. "
                        f"Retrying in {current_delay} seconds..."
                    )
                    await asyncio.sleep(current_delay)
                    current_delay *= backoff

        return wrapper

    return decorator

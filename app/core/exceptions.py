# app/core/exceptions.py
"""
Domain errors raised by the service layer.

Routers translate them to HTTP responses with ``to_http_exception``; the
status code lives on the class so the mapping stays in one place.
"""

from fastapi import HTTPException


class QuizRoomError(Exception):
    """Base class for every error the services raise on purpose"""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(QuizRoomError):
    status_code = 404


class RoomNotFoundError(NotFoundError):
    def __init__(self, code: str):
        super().__init__(f"Room {code} not found")
        self.code = code


class SessionNotFoundError(NotFoundError):
    pass


class UserNotFoundError(NotFoundError):
    pass


class ConflictError(QuizRoomError):
    status_code = 409


class InvalidStateError(QuizRoomError):
    status_code = 400


class UpstreamUnavailableError(QuizRoomError):
    status_code = 503


class RateLimitedError(UpstreamUnavailableError):
    """Upstream answered 429; the only failure worth retrying"""
    pass


class PermissionDeniedError(QuizRoomError):
    status_code = 403


def to_http_exception(error: QuizRoomError) -> HTTPException:
    """Convert a domain error into the HTTPException FastAPI understands"""
    return HTTPException(status_code=error.status_code, detail=error.message)

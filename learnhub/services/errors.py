from __future__ import annotations


class LearningError(Exception):
    """Base class for domain errors raised by the LearnHub services.

    ``code`` is a stable machine readable identifier, ``message`` the human
    readable detail returned to API clients.
    """

    status_code: int = 400
    default_code: str = "learning_error"

    def __init__(self, message: str, *, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code

    def __str__(self) -> str:  # pragma: no cover - human readable message
        return self.message


class NotFoundError(LearningError):
    status_code = 404
    default_code = "not_found"


class ValidationFailedError(LearningError):
    status_code = 400
    default_code = "validation_failed"


class AccessDeniedError(LearningError):
    status_code = 403
    default_code = "access_denied"


class ConflictError(LearningError):
    status_code = 409
    default_code = "conflict"

"""Error taxonomy shared by every pipeline stage."""

from typing import Optional


class NewsCuratorError(Exception):
    """Base error for the curator."""

    def __init__(self, message: str, details: Optional[dict] = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(NewsCuratorError):
    """Missing or invalid settings."""


class StorageError(NewsCuratorError):
    """Persistence collaborator failed."""


class StageError(NewsCuratorError):
    """A whole pipeline stage failed."""


class TextGenerationError(NewsCuratorError):
    """Base error for text-generation calls."""


class TransientError(TextGenerationError):
    """Failure that may succeed on retry (timeouts, 5xx, rate limiting)."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message, {"status_code": status_code} if status_code else None)
        self.status_code = status_code


class RateLimitError(TransientError):
    """Provider-side rate limiting."""


class FatalError(TextGenerationError):
    """Failure no amount of waiting will fix."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message, {"status_code": status_code} if status_code else None)
        self.status_code = status_code


class AuthenticationError(FatalError):
    """Invalid or missing credentials."""


class QuotaExceededError(FatalError):
    """Account quota or credit exhausted."""


class MalformedRequestError(FatalError):
    """Provider rejected the request itself."""


class ExhaustedRetries(TextGenerationError):
    """All retry attempts failed with retryable errors."""

    def __init__(self, attempts: int, last_error: Optional[BaseException]) -> None:
        super().__init__(
            f"Gave up after {attempts} attempts: {last_error}",
            {"attempts": attempts},
        )
        self.attempts = attempts
        self.last_error = last_error


class ResponseValidationError(TextGenerationError):
    """Response did not satisfy the required schema."""

    def __init__(self, schema_name: str, reason: str, raw: str = "") -> None:
        super().__init__(f"{schema_name} response failed validation: {reason}")
        self.schema_name = schema_name
        self.reason = reason
        self.raw = raw

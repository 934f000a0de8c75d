"""Custom exception hierarchy for holdermap."""

from typing import Any


class HoldermapError(Exception):
    """Base exception for all holdermap errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ValidationError(HoldermapError, ValueError):
    """Invalid argument supplied by the caller."""

    pass


class ResolutionError(HoldermapError):
    """Failed to resolve an artifact from an upstream service."""

    pass


class UpstreamUnavailableError(ResolutionError):
    """Transport or timeout failure talking to an upstream service."""

    def __init__(
        self,
        message: str,
        source: str,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.source = source
        self.status_code = status_code


class UpstreamNotFoundError(ResolutionError):
    """Upstream service affirmatively reports the resource does not exist."""

    def __init__(
        self,
        message: str,
        source: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.source = source


class RateLimitError(ResolutionError):
    """Rate limit exceeded for an upstream service."""

    def __init__(
        self,
        message: str,
        source: str,
        retry_after: float | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.source = source
        self.retry_after = retry_after


class CaptureError(HoldermapError):
    """Screenshot capture failed."""

    pass


class TransientCaptureError(CaptureError):
    """A single navigation/screenshot attempt failed."""

    def __init__(
        self,
        message: str,
        attempt: int,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.attempt = attempt


class ExhaustedRetriesError(CaptureError):
    """Every capture attempt failed."""

    def __init__(
        self,
        message: str,
        attempts: int,
        last_error: BaseException | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details)
        self.attempts = attempts
        self.last_error = last_error


class CacheError(HoldermapError):
    """Cache backend operation failed."""

    pass

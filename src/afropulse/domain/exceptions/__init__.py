"""Domain exceptions."""

from typing import Any


class DomainException(Exception):
    """Base exception for all domain exceptions."""

    # Hey future me, message lives on the instance so handlers can read it without
    # parsing str(exc). Never raise this directly - pick a subclass so callers can
    # catch precisely.
    def __init__(self, message: str, *args: Any) -> None:
        super().__init__(message, *args)
        self.message = message


class ValidationError(DomainException):
    """Input or configuration value is invalid.

    Raised for programmer errors such as a negative or non-integer maximum
    result size. These fail fast; they are never swallowed by the pipeline.

    HTTP Status: 422
    """

    pass


class ConfigurationError(DomainException):
    """Application misconfiguration.

    Example:
        raise ConfigurationError("Catalog credentials not configured")

    HTTP Status: 503 (Service Unavailable)
    """

    pass


class ExternalServiceError(DomainException):
    """An upstream source returned an error or an unreadable body.

    HTTP Status: 502 (Bad Gateway)
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitExceededError(DomainException):
    """Upstream source answered 429 Too Many Requests.

    We do NOT retry - the adapter just fails and contributes nothing.

    HTTP Status: 429
    """

    def __init__(self, message: str, retry_after: int | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class SourceUnavailableError(DomainException):
    """A source adapter could not deliver records (network error, timeout, bad status).

    Hey future me - this is the "recoverable" error of the pipeline! The
    aggregation service records it per adapter and keeps going with the
    remaining sources. It never reaches the caller as a raised exception.
    """

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"Source '{source}' unavailable: {reason}")
        self.source = source
        self.reason = reason


__all__ = [
    "DomainException",
    "ValidationError",
    "ConfigurationError",
    "ExternalServiceError",
    "RateLimitExceededError",
    "SourceUnavailableError",
]

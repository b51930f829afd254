"""Typed failures raised by remote status sources."""

from __future__ import annotations

from typing import Iterable, Sequence, Tuple


class StatusSourceError(RuntimeError):
    """Base exception for status source failures."""


class UnauthorizedError(StatusSourceError):
    """The API token is invalid or expired."""

    def __init__(self) -> None:
        super().__init__("Invalid or expired API token")


class RateLimitedError(StatusSourceError):
    """The platform API refused the request because of rate limiting."""

    def __init__(self, retry_after_seconds: float | None = None) -> None:
        message = "Rate limited by the Railway API"
        if retry_after_seconds is not None:
            message = f"{message} (retry after {retry_after_seconds:g}s)"
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds


class NetworkError(StatusSourceError):
    """Transport-level failure (connection, timeout, unexpected HTTP status)."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Network error: {detail}")
        self.detail = detail


class DecodeError(StatusSourceError):
    """Response payload could not be parsed into the expected shape."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Failed to parse response: {detail}")
        self.detail = detail


class NotFoundError(StatusSourceError):
    """The requested service, project or deployment does not exist."""

    def __init__(self, resource: str = "") -> None:
        message = "Resource not found"
        if resource:
            message = f"{message}: {resource}"
        super().__init__(message)
        self.resource = resource


class ApiError(StatusSourceError):
    """GraphQL errors that do not map to a more specific failure."""

    def __init__(self, messages: Iterable[str]) -> None:
        self.messages: Tuple[str, ...] = tuple(messages)
        super().__init__(", ".join(self.messages) or "Unknown API error")


def describe_error(exc: BaseException) -> str:
    """Message recorded as the engine's last error for a failed fetch."""
    text = str(exc)
    if text:
        return text
    return type(exc).__name__


def messages_of(errors: Sequence[object]) -> Tuple[str, ...]:
    """Extract message strings from a GraphQL ``errors`` array."""
    extracted = []
    for entry in errors:
        if isinstance(entry, dict) and entry.get("message"):
            extracted.append(str(entry["message"]))
        else:
            extracted.append(str(entry))
    return tuple(extracted)


__all__ = [
    "ApiError",
    "DecodeError",
    "NetworkError",
    "NotFoundError",
    "RateLimitedError",
    "StatusSourceError",
    "UnauthorizedError",
    "describe_error",
    "messages_of",
]

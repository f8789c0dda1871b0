from __future__ import annotations

from typing import Any, Optional


class FindAIError(Exception):
    """Base class for every error raised by find_ai and the llm adapters."""


class ConfigurationError(FindAIError):
    """Credential or model missing; the user has to visit settings."""


class TransportError(FindAIError):
    """Network or HTTP failure talking to the chat endpoint."""

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.status = status


class AuthError(TransportError):
    pass


class RateLimitError(TransportError):
    pass


class NotFoundError(TransportError):
    pass


class StreamParseError(FindAIError):
    """One malformed frame in a streamed body. The stream itself continues."""

    def __init__(self, message: str, frame: str = "") -> None:
        super().__init__(message)
        self.frame = frame


class CancellationNotice(FindAIError):
    """User-initiated abort. Never surfaced as an error message."""


class HighlightApplyError(FindAIError):
    """A single match could not be wrapped; other matches are unaffected."""

    def __init__(self, message: str, match: Any = None) -> None:
        super().__init__(message)
        self.match = match

"""Error taxonomy shared by the tree, adapter and AI layers."""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    """Classification attached to every StudioFlow error."""
    NOT_FOUND = "not_found"
    RATE_LIMIT = "rate_limit"
    TOO_LARGE = "too_large"
    NETWORK = "network"
    AUTH = "auth"
    SAFETY = "safety"
    INVALID_INPUT = "invalid_input"
    UNKNOWN = "unknown"


class StudioFlowError(Exception):
    """Base class for errors surfaced to callers.

    The message is meant to be shown to a user as-is.
    """

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status

    def __str__(self) -> str:
        return self.message


class NotFoundError(StudioFlowError):
    """Repository or file does not exist (or is private)."""
    kind = ErrorKind.NOT_FOUND


class RateLimitedError(StudioFlowError):
    """Remote service refused the request (forbidden or rate limited)."""
    kind = ErrorKind.RATE_LIMIT


class TooLargeError(StudioFlowError):
    """Payload exceeds the size the remote service or we accept."""
    kind = ErrorKind.TOO_LARGE


class NetworkError(StudioFlowError):
    """Transport level failure."""
    kind = ErrorKind.NETWORK


class InvalidInputError(StudioFlowError):
    """Caller supplied input we cannot work with."""
    kind = ErrorKind.INVALID_INPUT

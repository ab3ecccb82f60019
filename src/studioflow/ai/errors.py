"""LLM error type and classification."""

import asyncio
import re
from typing import Any, Optional

from ..core.errors import ErrorKind, StudioFlowError

AI_ERROR_KINDS = (
    ErrorKind.AUTH,
    ErrorKind.RATE_LIMIT,
    ErrorKind.NETWORK,
    ErrorKind.SAFETY,
    ErrorKind.UNKNOWN,
)

_AUTH_PATTERN = re.compile(r'401|403')
_RATE_LIMIT_PATTERN = re.compile(r'429')
_SAFETY_PATTERN = re.compile(r'safety', re.IGNORECASE)
_NETWORK_PATTERN = re.compile(r'network|fetch|timeout|connection', re.IGNORECASE)


class AIError(StudioFlowError):
    """Failure talking to the LLM provider, with its classification."""

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.UNKNOWN,
                 status: Optional[int] = None):
        super().__init__(message, status=status)
        self.kind = kind


def kind_for_status(status: Optional[int]) -> ErrorKind:
    """Map an HTTP status from the provider to an error kind."""
    if status in (401, 403):
        return ErrorKind.AUTH
    if status == 429:
        return ErrorKind.RATE_LIMIT
    return ErrorKind.UNKNOWN


def classify_error(error: Any) -> AIError:
    """
    Turn any exception into an AIError.

    Checks the message for known status codes and keywords. Patterns that
    match nothing become UNKNOWN; classification itself never raises.
    """
    if isinstance(error, AIError):
        return error

    try:
        message = str(error) if error is not None else ""
    except Exception:
        message = ""
    if not message:
        message = type(error).__name__ if error is not None else "Unknown error"
    status = getattr(error, 'status', None) or getattr(error, 'status_code', None)
    if not isinstance(status, int):
        status = None

    if isinstance(error, StudioFlowError) and error.kind in AI_ERROR_KINDS:
        return AIError(message, error.kind, status)

    status_kind = kind_for_status(status)
    if status_kind is not ErrorKind.UNKNOWN:
        return AIError(message, status_kind, status)
    if _AUTH_PATTERN.search(message):
        return AIError(message, ErrorKind.AUTH, status)
    if _RATE_LIMIT_PATTERN.search(message):
        return AIError(message, ErrorKind.RATE_LIMIT, status)
    if _SAFETY_PATTERN.search(message):
        return AIError(message, ErrorKind.SAFETY, status)
    if isinstance(error, (ConnectionError, asyncio.TimeoutError, TimeoutError)) \
            or _NETWORK_PATTERN.search(message):
        return AIError(message, ErrorKind.NETWORK, status)
    return AIError(message, ErrorKind.UNKNOWN, status)

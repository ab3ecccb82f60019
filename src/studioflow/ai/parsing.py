"""Normalization of provider payloads into GenerationResult."""

from typing import Any, Dict, Optional

from .models.common import GenerationResult

FINISH_REASONS = {"stop", "length", "safety", "error"}

# Gemini reports upper-case enum names; OpenAI uses its own vocabulary
_FINISH_REASON_ALIASES = {
    "STOP": "stop",
    "MAX_TOKENS": "length",
    "SAFETY": "safety",
    "RECITATION": "safety",
    "BLOCKLIST": "safety",
    "PROHIBITED_CONTENT": "safety",
    "SPII": "safety",
    "OTHER": "error",
    "MALFORMED_FUNCTION_CALL": "error",
    "content_filter": "safety",
    "tool_calls": "stop",
    "function_call": "stop",
}


def normalize_finish_reason(reason: Optional[str]) -> str:
    """Map a provider finish reason onto stop/length/safety/error.

    Missing reasons default to ``stop``; unrecognized ones become ``error``.
    """
    if not reason:
        return "stop"
    if reason in FINISH_REASONS:
        return reason
    return _FINISH_REASON_ALIASES.get(reason, "error")


def normalize_response(raw: Optional[Dict[str, Any]]) -> GenerationResult:
    """
    Extract text and finish reason from a ``generateContent`` payload.

    The first candidate's text parts are concatenated; a payload without
    candidates yields empty text and ``stop``. The original payload is
    kept in ``raw`` for diagnostics. Never raises on malformed input.
    """
    candidates = raw.get("candidates") if isinstance(raw, dict) else None
    first = candidates[0] if isinstance(candidates, list) and candidates else None
    if not isinstance(first, dict):
        first = {}

    content = first.get("content")
    parts = content.get("parts") if isinstance(content, dict) else None
    text = "".join(
        part.get("text") or "" for part in (parts or []) if isinstance(part, dict)
    )

    tokens = None
    usage = raw.get("usageMetadata") if isinstance(raw, dict) else None
    if isinstance(usage, dict):
        tokens = usage.get("totalTokenCount")

    return GenerationResult(
        text=text,
        finish_reason=normalize_finish_reason(first.get("finishReason")),
        tokens=tokens,
        raw=raw,
    )

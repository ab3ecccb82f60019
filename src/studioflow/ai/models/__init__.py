"""Data models for the LLM layer."""

from .common import (
    ChatMessage,
    FinishReason,
    GenerationChunk,
    GenerationRequest,
    GenerationResult,
    MessageRole,
    new_id,
    now_ms,
)

__all__ = [
    "ChatMessage",
    "FinishReason",
    "GenerationChunk",
    "GenerationRequest",
    "GenerationResult",
    "MessageRole",
    "new_id",
    "now_ms",
]

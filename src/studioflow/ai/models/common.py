"""Common data models for LLM adapters."""

import secrets
import time
from enum import Enum
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

_ID_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789"

FinishReason = Literal["stop", "length", "safety", "error"]


def new_id(size: int = 12) -> str:
    """Random lowercase alphanumeric identifier."""
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(size))


def now_ms() -> int:
    return int(time.time() * 1000)


class MessageRole(str, Enum):
    """Valid message roles."""
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ChatMessage(BaseModel):
    """A message in the conversation. Immutable once created."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    role: MessageRole
    content: str
    created_at: int = Field(default_factory=now_ms)  # epoch milliseconds


class GenerationRequest(BaseModel):
    """Request to an LLM provider."""
    model: str
    messages: List[ChatMessage]
    context: Optional[str] = None
    temperature: Optional[float] = None
    max_tokens: Optional[int] = None
    stream: bool = False


class GenerationChunk(BaseModel):
    """A streamed piece of generated text."""
    delta: str
    done: bool = False


class GenerationResult(BaseModel):
    """Normalized provider response."""
    text: str = ""
    finish_reason: FinishReason = "stop"
    tokens: Optional[int] = None
    raw: Any = None

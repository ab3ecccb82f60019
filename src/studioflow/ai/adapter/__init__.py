"""LLM provider adapters."""

from .base import BaseLLMAdapter, ChunkCallback
from .factory import AdapterFactory, create_llm_adapter
from .gemini_adapter import GeminiAdapter
from .openai_adapter import OpenAIAdapter

__all__ = [
    "BaseLLMAdapter",
    "ChunkCallback",
    "AdapterFactory",
    "create_llm_adapter",
    "GeminiAdapter",
    "OpenAIAdapter",
]

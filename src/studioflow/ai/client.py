"""High-level LLM client bound to one adapter and its defaults."""

import logging
from typing import Callable, Optional, Sequence

from .adapter import BaseLLMAdapter, create_llm_adapter
from .config import LLMConfig, get_llm_config_from_env
from .models.common import (
    ChatMessage,
    GenerationChunk,
    GenerationRequest,
    GenerationResult,
    MessageRole,
)

logger = logging.getLogger(__name__)

DeltaCallback = Callable[[str], None]


class LLMClient:
    """Fills in model, token limit and temperature for every request."""

    def __init__(self, adapter: BaseLLMAdapter, default_model: Optional[str] = None,
                 max_tokens: Optional[int] = None, temperature: Optional[float] = None):
        self.adapter = adapter
        self.default_model = default_model or adapter.model
        self.max_tokens = max_tokens
        self.temperature = temperature

    @classmethod
    def from_config(cls, config: LLMConfig) -> "LLMClient":
        return cls(
            create_llm_adapter(config),
            default_model=config.model,
            max_tokens=config.max_output_tokens,
            temperature=config.temperature,
        )

    @classmethod
    def from_env(cls) -> "LLMClient":
        """Client for the provider configured in the environment."""
        return cls.from_config(get_llm_config_from_env())

    def _request(self, messages: Sequence[ChatMessage], context: Optional[str],
                 model: Optional[str], stream: bool) -> GenerationRequest:
        return GenerationRequest(
            model=model or self.default_model,
            messages=list(messages),
            context=context,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            stream=stream,
        )

    async def generate(self, messages: Sequence[ChatMessage], context: Optional[str] = None,
                       model: Optional[str] = None) -> GenerationResult:
        """Generate one complete reply to ``messages``."""
        request = self._request(messages, context, model, stream=False)
        logger.debug("Generating with %s (%d messages)", request.model, len(request.messages))
        return await self.adapter.generate(request)

    async def complete(self, prompt: str, model: Optional[str] = None) -> GenerationResult:
        """Generate a reply to a single user prompt."""
        message = ChatMessage(role=MessageRole.USER, content=prompt)
        return await self.generate([message], model=model)

    async def stream(self, messages: Sequence[ChatMessage], on_delta: DeltaCallback,
                     context: Optional[str] = None, model: Optional[str] = None) -> GenerationResult:
        """
        Generate a reply, calling ``on_delta`` with each non-empty text delta.

        Returns the full result once the provider signals completion.
        """
        request = self._request(messages, context, model, stream=True)
        logger.debug("Streaming with %s (%d messages)", request.model, len(request.messages))

        def on_chunk(chunk: GenerationChunk) -> None:
            if chunk.delta:
                on_delta(chunk.delta)

        return await self.adapter.stream(request, on_chunk)

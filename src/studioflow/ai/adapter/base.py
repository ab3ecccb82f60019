"""Abstract base adapter for LLM providers."""

import logging
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional

from ..models.common import GenerationChunk, GenerationRequest, GenerationResult

logger = logging.getLogger(__name__)

ChunkCallback = Callable[[GenerationChunk], None]


class BaseLLMAdapter(ABC):
    """Abstract base class for all LLM provider adapters.

    Adapters turn a GenerationRequest into one provider payload and the
    provider's reply into a normalized GenerationResult. Every failure is
    raised as an AIError.
    """

    def __init__(self, model: str, api_key: Optional[str] = None, base_url: Optional[str] = None):
        self.model = model
        self.api_key = api_key
        self.base_url = base_url

    @property
    def provider_name(self) -> str:
        """Return the name of this provider."""
        return self.__class__.__name__.replace("Adapter", "").lower()

    @abstractmethod
    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Generate a complete response for ``request``."""
        pass

    async def stream(self, request: GenerationRequest, on_chunk: ChunkCallback) -> GenerationResult:
        """
        Generate a response, reporting text as it arrives.

        Providers without incremental output deliver the whole text as one
        final chunk.
        """
        result = await self.generate(request)
        on_chunk(GenerationChunk(delta=result.text, done=True))
        return result

    def _log_completion(self, request: GenerationRequest, started: float,
                        result: GenerationResult) -> None:
        logger.debug(
            "%s %s finished in %.2fs (%s, %d chars)",
            self.provider_name, request.model, time.monotonic() - started,
            result.finish_reason, len(result.text),
        )

    def __repr__(self) -> str:
        """String representation of the adapter."""
        return f"{self.__class__.__name__}(model='{self.model}', provider='{self.provider_name}')"

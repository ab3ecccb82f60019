"""OpenAI adapter implementation with streaming support."""

import time
from typing import Any, Dict, Optional

from openai import APIConnectionError, AsyncOpenAI
from openai.types.chat import ChatCompletionChunk

from ...core.errors import ErrorKind
from ..errors import AIError, classify_error
from ..models.common import GenerationChunk, GenerationRequest, GenerationResult
from ..parsing import normalize_finish_reason
from ..prompts import build_prompt
from .base import BaseLLMAdapter, ChunkCallback


class OpenAIAdapter(BaseLLMAdapter):
    """OpenAI chat completions, or any OpenAI-compatible endpoint via ``base_url``."""

    def __init__(self, model: str, api_key: Optional[str] = None,
                 base_url: Optional[str] = None, timeout: float = 60.0):
        super().__init__(model=model, api_key=api_key, base_url=base_url)
        if not self.api_key:
            raise AIError("OpenAI API key is required", ErrorKind.AUTH)

        self.client = AsyncOpenAI(api_key=self.api_key, base_url=base_url, timeout=timeout)

    def _build_params(self, request: GenerationRequest) -> Dict[str, Any]:
        """Build API parameters from request."""
        params: Dict[str, Any] = {
            "model": request.model or self.model,
            "messages": [{"role": "user", "content": build_prompt(request.messages, request.context)}],
        }
        if request.max_tokens:
            params["max_tokens"] = request.max_tokens
        if request.temperature is not None:
            params["temperature"] = request.temperature
        return params

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Non-streaming completion."""
        started = time.monotonic()
        try:
            response = await self.client.chat.completions.create(**self._build_params(request))
        except APIConnectionError as e:
            raise AIError(str(e) or "Connection error", ErrorKind.NETWORK) from e
        except Exception as e:
            raise classify_error(e) from e

        choice = response.choices[0] if response.choices else None
        content = ""
        finish_reason = None
        if choice is not None:
            content = choice.message.content or ""
            finish_reason = choice.finish_reason
            # Refusals come back in their own field
            if not content and getattr(choice.message, "refusal", None):
                content = choice.message.refusal
                finish_reason = "content_filter"

        result = GenerationResult(
            text=content,
            finish_reason=normalize_finish_reason(finish_reason),
            tokens=response.usage.total_tokens if response.usage else None,
            raw=response.model_dump(),
        )
        self._log_completion(request, started, result)
        return result

    async def stream(self, request: GenerationRequest, on_chunk: ChunkCallback) -> GenerationResult:
        """Stream completion deltas."""
        started = time.monotonic()
        params = self._build_params(request)
        params["stream"] = True

        text = ""
        finish_reason = None
        try:
            stream = await self.client.chat.completions.create(**params)
            async for chunk in stream:
                chunk: ChatCompletionChunk
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta.content
                if delta:
                    text += delta
                    on_chunk(GenerationChunk(delta=delta))
                if chunk.choices[0].finish_reason:
                    finish_reason = chunk.choices[0].finish_reason
        except APIConnectionError as e:
            raise AIError(str(e) or "Connection error", ErrorKind.NETWORK) from e
        except Exception as e:
            raise classify_error(e) from e

        on_chunk(GenerationChunk(delta="", done=True))
        result = GenerationResult(text=text, finish_reason=normalize_finish_reason(finish_reason))
        self._log_completion(request, started, result)
        return result

"""Gemini REST adapter with server-sent-event streaming."""

import asyncio
import json
import logging
import time
from typing import Any, Dict, List, Optional

import aiohttp

from ...core.errors import ErrorKind
from ..errors import AIError, classify_error, kind_for_status
from ..models.common import GenerationChunk, GenerationRequest, GenerationResult
from ..parsing import normalize_response
from ..prompts import build_prompt
from .base import BaseLLMAdapter, ChunkCallback

logger = logging.getLogger(__name__)

API_URL = "https://generativelanguage.googleapis.com/v1beta/models"


class GeminiAdapter(BaseLLMAdapter):
    """Talks to the Gemini ``generateContent`` REST endpoints."""

    def __init__(self, model: str, api_key: Optional[str] = None,
                 base_url: Optional[str] = None, timeout: float = 60.0):
        super().__init__(model=model, api_key=api_key, base_url=base_url or API_URL)
        if not self.api_key:
            raise AIError("Gemini API key is required", ErrorKind.AUTH)
        self.timeout = timeout

    def _build_body(self, request: GenerationRequest) -> Dict[str, Any]:
        prompt = build_prompt(request.messages, request.context)
        generation_config = {}
        if request.max_tokens:
            generation_config["maxOutputTokens"] = request.max_tokens
        if request.temperature is not None:
            generation_config["temperature"] = request.temperature

        body: Dict[str, Any] = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        if generation_config:
            body["generationConfig"] = generation_config
        return body

    def _session(self) -> aiohttp.ClientSession:
        headers = {
            "Content-Type": "application/json",
            "x-goog-api-key": self.api_key,
        }
        return aiohttp.ClientSession(headers=headers,
                                     timeout=aiohttp.ClientTimeout(total=self.timeout))

    async def _raise_for_status(self, response: aiohttp.ClientResponse) -> None:
        if response.status == 200:
            return
        detail = await response.text()
        logger.debug("Gemini returned %s: %s", response.status, detail[:500])
        kind = kind_for_status(response.status)
        if kind is ErrorKind.UNKNOWN and "safety" in detail.lower():
            kind = ErrorKind.SAFETY
        raise AIError(f"Gemini error status {response.status}", kind, response.status)

    @staticmethod
    def _check_blocked(payload: Dict[str, Any]) -> None:
        feedback = payload.get("promptFeedback") if isinstance(payload, dict) else None
        if isinstance(feedback, dict) and feedback.get("blockReason"):
            raise AIError(f"Prompt blocked by safety filters: {feedback['blockReason']}",
                          ErrorKind.SAFETY)

    async def generate(self, request: GenerationRequest) -> GenerationResult:
        """Single ``generateContent`` call."""
        started = time.monotonic()
        url = f"{self.base_url}/{request.model}:generateContent"
        try:
            async with self._session() as session:
                async with session.post(url, json=self._build_body(request)) as response:
                    await self._raise_for_status(response)
                    payload = await response.json()
            self._check_blocked(payload)
            result = normalize_response(payload)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise AIError(f"Network error talking to Gemini: {e}", ErrorKind.NETWORK) from e
        except Exception as e:
            raise classify_error(e) from e

        self._log_completion(request, started, result)
        return result

    async def stream(self, request: GenerationRequest, on_chunk: ChunkCallback) -> GenerationResult:
        """``streamGenerateContent`` with ``alt=sse``; one callback per text delta."""
        started = time.monotonic()
        url = f"{self.base_url}/{request.model}:streamGenerateContent"
        text = ""
        finish_reason = "stop"
        payloads: List[Dict[str, Any]] = []

        try:
            async with self._session() as session:
                async with session.post(url, params={"alt": "sse"},
                                        json=self._build_body(request)) as response:
                    await self._raise_for_status(response)
                    async for raw_line in response.content:
                        line = raw_line.decode("utf-8").strip()
                        if not line.startswith("data:"):
                            continue
                        payload = json.loads(line[len("data:"):].strip())
                        payloads.append(payload)
                        self._check_blocked(payload)

                        piece = normalize_response(payload)
                        if piece.text:
                            text += piece.text
                            on_chunk(GenerationChunk(delta=piece.text))
                        candidates = payload.get("candidates") or []
                        if candidates and candidates[0].get("finishReason"):
                            finish_reason = piece.finish_reason
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise AIError(f"Network error talking to Gemini: {e}", ErrorKind.NETWORK) from e
        except Exception as e:
            raise classify_error(e) from e

        on_chunk(GenerationChunk(delta="", done=True))
        result = GenerationResult(text=text, finish_reason=finish_reason, raw=payloads)
        self._log_completion(request, started, result)
        return result

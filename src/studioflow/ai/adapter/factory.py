"""Factory for creating LLM adapters from configuration."""

from typing import Dict, Type

from ...core.errors import InvalidInputError
from ..config import LLMConfig
from .base import BaseLLMAdapter
from .gemini_adapter import GeminiAdapter
from .openai_adapter import OpenAIAdapter


class AdapterFactory:
    """Registry of provider adapters."""

    _adapters: Dict[str, Type[BaseLLMAdapter]] = {
        "gemini": GeminiAdapter,
        "openai": OpenAIAdapter,
    }

    @classmethod
    def register_adapter(cls, provider: str, adapter_class: Type[BaseLLMAdapter]):
        """Register a new adapter type."""
        cls._adapters[provider] = adapter_class

    @classmethod
    def list_providers(cls):
        return sorted(cls._adapters)

    @classmethod
    def create_adapter(cls, config: LLMConfig) -> BaseLLMAdapter:
        """Create the adapter for ``config.provider``.

        Raises:
            InvalidInputError: If no adapter is registered for the provider.
        """
        adapter_class = cls._adapters.get(config.provider)
        if adapter_class is None:
            raise InvalidInputError(
                f"Unknown LLM provider: {config.provider}. "
                f"Available: {', '.join(cls.list_providers())}"
            )
        return adapter_class(
            model=config.model,
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.request_timeout,
        )


def create_llm_adapter(config: LLMConfig) -> BaseLLMAdapter:
    """Shortcut for ``AdapterFactory.create_adapter``."""
    return AdapterFactory.create_adapter(config)

"""LLM provider configuration loaded from the environment."""

import os
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from ..core.errors import InvalidInputError

DEFAULT_GEMINI_MODEL = "gemini-1.5-flash"
DEFAULT_OPENAI_MODEL = "gpt-4o-mini"
DEFAULT_MAX_OUTPUT_TOKENS = 1024
DEFAULT_TEMPERATURE = 0.7


class LLMConfig(BaseModel):
    """Settings for the configured LLM provider."""

    provider: Literal["gemini", "openai"] = "gemini"
    api_key: str = Field(min_length=10)
    model: str = DEFAULT_GEMINI_MODEL
    base_url: Optional[str] = None
    max_output_tokens: int = Field(default=DEFAULT_MAX_OUTPUT_TOKENS, gt=0, le=8192)
    temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0.0, le=2.0)
    request_timeout: float = 60.0

    @field_validator("provider", mode="before")
    @classmethod
    def _lower_provider(cls, value):
        return value.lower() if isinstance(value, str) else value


def get_llm_config_from_env() -> LLMConfig:
    """Build the LLM configuration from environment variables.

    ``LLM_PROVIDER`` picks ``gemini`` (default) or ``openai``. Gemini reads
    ``GEMINI_API_KEY``, ``GEMINI_MODEL`` and ``GEMINI_MAX_OUTPUT_TOKENS``;
    OpenAI reads ``OPENAI_API_KEY``, ``OPENAI_MODEL`` and ``OPENAI_BASE_URL``.

    Raises:
        InvalidInputError: When the key is missing or a value is out of range.
    """
    load_dotenv()

    provider = os.getenv("LLM_PROVIDER", "gemini").lower()
    values = {"provider": provider}

    if provider == "openai":
        values["api_key"] = os.getenv("OPENAI_API_KEY") or os.getenv("LLM_API_KEY") or ""
        values["model"] = os.getenv("OPENAI_MODEL") or os.getenv("LLM_MODEL") or DEFAULT_OPENAI_MODEL
        base_url = os.getenv("OPENAI_BASE_URL") or os.getenv("LLM_BASE_URL")
        if base_url:
            values["base_url"] = base_url
        max_tokens = os.getenv("OPENAI_MAX_OUTPUT_TOKENS")
    else:
        values["api_key"] = os.getenv("GEMINI_API_KEY") or ""
        values["model"] = os.getenv("GEMINI_MODEL") or DEFAULT_GEMINI_MODEL
        max_tokens = os.getenv("GEMINI_MAX_OUTPUT_TOKENS")

    if max_tokens:
        values["max_output_tokens"] = max_tokens
    temperature = os.getenv("LLM_TEMPERATURE")
    if temperature:
        values["temperature"] = temperature

    try:
        return LLMConfig(**values)
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors())
        if "api_key" in fields:
            key_name = "OPENAI_API_KEY" if provider == "openai" else "GEMINI_API_KEY"
            raise InvalidInputError(f"Missing {key_name}. Add it to your environment or .env file.") from e
        raise InvalidInputError(f"Invalid LLM configuration: {fields}") from e

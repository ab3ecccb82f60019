"""LLM-backed chat and code analysis for StudioFlow."""

from .client import LLMClient
from .config import LLMConfig, get_llm_config_from_env
from .errors import AIError, classify_error
from .flows import (
    CodeExplanation,
    CodeSuggestions,
    FileSummary,
    ProjectOverview,
    explain_code_block,
    generate_code_suggestions,
    generate_file_summary,
    generate_project_overview,
)
from .models.common import ChatMessage, GenerationResult, MessageRole
from .parsing import normalize_response
from .prompts import build_prompt
from .session import ChatSession, SessionState, SessionStatus

__all__ = [
    "LLMClient",
    "LLMConfig",
    "get_llm_config_from_env",
    "AIError",
    "classify_error",
    "CodeExplanation",
    "CodeSuggestions",
    "FileSummary",
    "ProjectOverview",
    "explain_code_block",
    "generate_code_suggestions",
    "generate_file_summary",
    "generate_project_overview",
    "ChatMessage",
    "GenerationResult",
    "MessageRole",
    "normalize_response",
    "build_prompt",
    "ChatSession",
    "SessionState",
    "SessionStatus",
]

"""AI analysis flows: project overview, code explanation, file summary, suggestions.

Each flow renders a prompt, asks the LLM for a JSON object and validates
the reply into a pydantic model.
"""

import json
import logging
import re
from typing import List, Literal, Optional, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..core.errors import ErrorKind, InvalidInputError
from .client import LLMClient
from .errors import AIError, classify_error
from .prompts import (
    code_suggestions_prompt,
    explain_code_prompt,
    file_summary_prompt,
    project_overview_prompt,
)

logger = logging.getLogger(__name__)

MAX_SUMMARY_CHARS = 50_000
MAX_SUGGESTION_CHARS = 30_000

_FENCE_PATTERN = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL | re.IGNORECASE)

ModelT = TypeVar("ModelT", bound=BaseModel)


class _FlowOutput(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ProjectOverview(_FlowOutput):
    overview: str


class CodeExplanation(_FlowOutput):
    explanation: str


class FileSummary(_FlowOutput):
    summary: str
    key_components: List[str] = Field(default_factory=list, alias="keyComponents")
    purpose: str
    complexity: Literal["low", "medium", "high"]
    tags: List[str] = Field(default_factory=list)


class Suggestion(_FlowOutput):
    type: Literal["performance", "readability", "security", "best-practice",
                  "type-safety", "maintainability"]
    priority: Literal["low", "medium", "high"]
    title: str
    description: str
    example: Optional[str] = None


class CodeSuggestions(_FlowOutput):
    suggestions: List[Suggestion] = Field(default_factory=list)
    overall_quality: Literal["excellent", "good", "fair", "needs-improvement"] = Field(
        alias="overallQuality")
    summary: str


def extract_json(text: str) -> str:
    """Return the JSON object inside a model reply.

    Unwraps a fenced ```json block if present, otherwise takes the span
    from the first ``{`` to the last ``}``.
    """
    text = (text or "").strip()
    fenced = _FENCE_PATTERN.search(text)
    if fenced:
        return fenced.group(1)
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        return text[start:end + 1]
    return text


def parse_reply(text: str, model: Type[ModelT]) -> ModelT:
    """Validate a JSON reply into ``model``.

    Raises:
        AIError: UNKNOWN kind when the reply is not valid JSON for the model.
    """
    try:
        return model.model_validate(json.loads(extract_json(text)))
    except (json.JSONDecodeError, ValidationError) as e:
        logger.debug("Unparseable %s reply: %r", model.__name__, text[:500])
        raise AIError(f"The AI reply could not be read as {model.__name__}", ErrorKind.UNKNOWN) from e


async def _run_flow(client: LLMClient, prompt: str, model: Type[ModelT]) -> ModelT:
    result = await client.complete(prompt)
    if result.finish_reason == "safety":
        raise AIError("The reply was blocked by the provider's safety filters", ErrorKind.SAFETY)
    return parse_reply(result.text, model)


def _friendly(error: Exception, timeout: str, rate_limit: str, fallback: str) -> AIError:
    """Replace provider wording with a message meant for the user."""
    ai_error = classify_error(error)
    message = ai_error.message.lower()
    if ai_error.kind is ErrorKind.RATE_LIMIT or "quota" in message or "rate limit" in message:
        return AIError(rate_limit, ErrorKind.RATE_LIMIT, ai_error.status)
    if "timeout" in message or "timed out" in message:
        return AIError(timeout, ErrorKind.NETWORK, ai_error.status)
    if ai_error.kind in (ErrorKind.AUTH, ErrorKind.SAFETY, ErrorKind.NETWORK):
        return ai_error
    return AIError(fallback, ai_error.kind, ai_error.status)


async def generate_project_overview(client: LLMClient, repo_url: str,
                                    project_structure: Optional[str] = None) -> ProjectOverview:
    """High-level overview of a repository's architecture."""
    if not (repo_url or "").strip():
        raise InvalidInputError("Repository URL is required")
    try:
        return await _run_flow(client, project_overview_prompt(repo_url, project_structure),
                               ProjectOverview)
    except Exception as e:
        raise _friendly(
            e,
            timeout="Project analysis timed out. Please try again.",
            rate_limit="Too many analysis requests. Please wait before requesting another overview.",
            fallback="Unable to generate a project overview right now.",
        ) from e


async def explain_code_block(client: LLMClient, code: str, file_path: str,
                             project_structure: str) -> CodeExplanation:
    """Plain-language explanation of a code block in its project context."""
    if not (code or "").strip():
        raise InvalidInputError("Please select some code to explain.")
    try:
        return await _run_flow(client, explain_code_prompt(code, file_path, project_structure),
                               CodeExplanation)
    except Exception as e:
        raise _friendly(
            e,
            timeout="Code explanation timed out. Try a smaller selection.",
            rate_limit="Too many analysis requests. Please wait before asking for another explanation.",
            fallback="Unable to explain this code right now.",
        ) from e


async def generate_file_summary(client: LLMClient, file_name: str, file_path: str,
                                file_content: str,
                                project_context: Optional[str] = None) -> FileSummary:
    """Summary, key components, purpose, complexity and tags for one file.

    Raises:
        InvalidInputError: Empty content, missing name, or content over
            MAX_SUMMARY_CHARS characters.
        AIError: The provider failed or replied with something unreadable.
    """
    if not (file_content or "").strip():
        raise InvalidInputError("Cannot analyze empty file. Please select a file with content.")
    if not (file_name or "").strip():
        raise InvalidInputError("File name is required")
    if len(file_content) > MAX_SUMMARY_CHARS:
        raise InvalidInputError(
            "File too large for analysis. Please select a smaller file or specific sections.")

    prompt = file_summary_prompt(file_name, file_path, file_content, project_context)
    try:
        return await _run_flow(client, prompt, FileSummary)
    except Exception as e:
        raise _friendly(
            e,
            timeout="File analysis timed out. The file might be too complex or large.",
            rate_limit="Too many analysis requests. Please wait before analyzing more files.",
            fallback="Unable to analyze file. This might be due to file complexity or service limitations.",
        ) from e


async def generate_code_suggestions(client: LLMClient, code: str, file_path: str,
                                    language: Optional[str] = None,
                                    context: Optional[str] = None) -> CodeSuggestions:
    """Actionable improvement suggestions for a piece of code.

    Raises:
        InvalidInputError: Empty code, missing path, or code over
            MAX_SUGGESTION_CHARS characters.
        AIError: The provider failed or replied with something unreadable.
    """
    if not (code or "").strip():
        raise InvalidInputError("Please provide code to analyze for suggestions.")
    if not (file_path or "").strip():
        raise InvalidInputError("File path is required for context")
    if len(code) > MAX_SUGGESTION_CHARS:
        raise InvalidInputError("Code block too large for analysis. Please select a smaller section.")

    prompt = code_suggestions_prompt(code, file_path, language, context)
    try:
        return await _run_flow(client, prompt, CodeSuggestions)
    except Exception as e:
        raise _friendly(
            e,
            timeout="Code analysis timed out. Try analyzing a smaller code section.",
            rate_limit="Too many analysis requests. Please wait before requesting more suggestions.",
            fallback="Unable to analyze code for suggestions. "
                     "This might be due to code complexity or service limitations.",
        ) from e

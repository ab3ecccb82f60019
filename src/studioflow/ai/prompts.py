"""Prompt construction for chat and repository analysis.

The chat prompt is a single text payload: a fixed primer, an optional
context block, then the most recent messages as ``ROLE: content`` lines.
The analysis templates ask the model for a JSON object matching the
output models in ``flows``.
"""

from typing import Optional, Sequence

from .models.common import ChatMessage

# Older messages are dropped, not summarized
MAX_CONTEXT_MESSAGES = 20

SYSTEM_PRIMER = (
    "You are StudioFlow, an assistant that helps developers understand "
    "unfamiliar codebases. Answer concisely, reference file paths when you "
    "can, and say so when the provided context is not enough."
)


def build_prompt(messages: Sequence[ChatMessage], context: Optional[str] = None) -> str:
    """
    Render a chat history into one prompt string.

    Args:
        messages: Conversation in append order.
        context: Optional text (file content, project structure) placed
            between the primer and the conversation.

    Returns:
        The primer, the context block if any, and the last
        MAX_CONTEXT_MESSAGES messages, one ``ROLE: content`` line each.
    """
    trimmed = list(messages)[-MAX_CONTEXT_MESSAGES:]
    header = SYSTEM_PRIMER + (f"\nContext:\n{context}\n" if context else "\n")
    return header + "\n".join(
        f"{message.role.value.upper()}: {message.content}" for message in trimmed
    )


JSON_INSTRUCTION = (
    "Respond with a single JSON object only, no prose before or after it, "
    "using exactly these keys: {keys}."
)

PROJECT_OVERVIEW_TEMPLATE = """You are an AI expert in software architecture. You are given a public GitHub repository.
Analyze the repository and provide a high-level overview of the project's architecture, key components, and data flow.

GitHub Repository URL: {repo_url}
{structure_block}
{json_instruction}"""

EXPLAIN_CODE_TEMPLATE = """You are an expert software developer. Explain the following code block in plain language, taking into account the surrounding code and project structure.

Code Block:
```
{code}
```

File Path: {file_path}

Project Structure:
{project_structure}

{json_instruction}"""

FILE_SUMMARY_TEMPLATE = """You are an expert code analyst. Analyze the provided file and generate a concise, helpful summary.

File: {file_name}
Path: {file_path}
{context_block}
File Content:
```
{file_content}
```

Provide:
- summary: a 2-3 sentence overview of what this file does and its role in the project.
- keyComponents: the main functions, classes, components or exports (up to 10).
- purpose: the primary responsibility of this file in one sentence.
- complexity: "low" for simple files or configuration, "medium" for moderate logic, "high" for intricate logic or many dependencies.
- tags: 3-5 tags such as "component", "utility", "config", "api", "types", "test".

{json_instruction}"""

CODE_SUGGESTIONS_TEMPLATE = """You are an expert code reviewer and software architect. Analyze the provided code and offer specific, actionable improvement suggestions.

File: {file_path}
{language_block}{context_block}
Code to Analyze:
```
{code}
```

Examine performance, readability and maintainability, security, best practices and type safety.

Provide:
- suggestions: a list of objects with type (one of "performance", "readability", "security", "best-practice", "type-safety", "maintainability"), priority ("low", "medium" or "high"), title, description and an optional example.
- overallQuality: one of "excellent", "good", "fair", "needs-improvement".
- summary: key takeaways and the most important improvements.

{json_instruction}"""


def _json_instruction(*keys: str) -> str:
    return JSON_INSTRUCTION.format(keys=", ".join(keys))


def project_overview_prompt(repo_url: str, project_structure: Optional[str] = None) -> str:
    structure_block = f"\nProject Structure:\n{project_structure}\n" if project_structure else ""
    return PROJECT_OVERVIEW_TEMPLATE.format(
        repo_url=repo_url,
        structure_block=structure_block,
        json_instruction=_json_instruction("overview"),
    )


def explain_code_prompt(code: str, file_path: str, project_structure: str) -> str:
    return EXPLAIN_CODE_TEMPLATE.format(
        code=code,
        file_path=file_path,
        project_structure=project_structure,
        json_instruction=_json_instruction("explanation"),
    )


def file_summary_prompt(file_name: str, file_path: str, file_content: str,
                        project_context: Optional[str] = None) -> str:
    context_block = f"Project Context: {project_context}\n" if project_context else ""
    return FILE_SUMMARY_TEMPLATE.format(
        file_name=file_name,
        file_path=file_path,
        context_block=context_block,
        file_content=file_content,
        json_instruction=_json_instruction("summary", "keyComponents", "purpose", "complexity", "tags"),
    )


def code_suggestions_prompt(code: str, file_path: str, language: Optional[str] = None,
                            context: Optional[str] = None) -> str:
    language_block = f"Language: {language}\n" if language else ""
    context_block = f"Context: {context}\n" if context else ""
    return CODE_SUGGESTIONS_TEMPLATE.format(
        file_path=file_path,
        language_block=language_block,
        context_block=context_block,
        code=code,
        json_instruction=_json_instruction("suggestions", "overallQuality", "summary"),
    )

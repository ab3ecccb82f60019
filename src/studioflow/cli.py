"""Command-line interface for studioflow."""
import asyncio
import functools
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from . import __version__
from .adapters import DEMO_REPO_URL, create_adapter
from .ai import (
    ChatSession,
    LLMClient,
    SessionState,
    SessionStatus,
    explain_code_block,
    generate_code_suggestions,
    generate_file_summary,
    generate_project_overview,
)
from .core.errors import InvalidInputError, StudioFlowError
from .core.explorer import RepositoryExplorer
from .core.models import Config, FileNode
from .core.tree import iter_files, render_tree
from .storage import LocalStore
from .utils.compare import compare_lines, format_file_size
from .utils.console import ConsoleManager


def setup_logging(debug: bool) -> None:
    """Configure logging on stderr; DEBUG with ``--debug``, WARNING otherwise."""
    level = logging.DEBUG if debug else logging.WARNING
    format_string = '[%(levelname)s] %(name)s: %(message)s' if debug else '[%(levelname)s] %(message)s'

    logging.basicConfig(
        level=level,
        format=format_string,
        handlers=[logging.StreamHandler(sys.stderr)]
    )

    # Reduce noise from external libraries
    for name in ("urllib3", "aiohttp", "httpx", "httpcore", "openai", "github"):
        logging.getLogger(name).setLevel(logging.WARNING)


def run(coro):
    return asyncio.run(coro)


def handle_errors(func):
    """Turn failures into a one-line message and exit status 1."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        ctx = click.get_current_context()
        console = ConsoleManager()
        try:
            return func(*args, **kwargs)
        except StudioFlowError as e:
            console.print_error(e.message)
            sys.exit(1)
        except KeyboardInterrupt:
            console.print_error("Interrupted")
            sys.exit(1)
        except Exception as e:
            console.print_error(f"Unexpected error: {e}")
            if ctx.obj is not None and ctx.obj.debug:
                console.console.print_exception()
            sys.exit(1)
    return wrapper


def _explore(config: Config, repo_url: str, demo: bool) -> RepositoryExplorer:
    explorer = RepositoryExplorer(create_adapter(repo_url, config, demo=demo))
    run(explorer.load())
    return explorer


def _open(config: Config, repo_url: str, path: str, demo: bool) -> Tuple[RepositoryExplorer, FileNode]:
    explorer = _explore(config, repo_url, demo)
    node = run(explorer.select_path(path))
    return explorer, node


def _repo_arg(repo_url: Optional[str], demo: bool) -> str:
    if repo_url:
        return repo_url
    if demo:
        return DEMO_REPO_URL
    raise InvalidInputError("Please enter a repository URL.")


demo_option = click.option('--demo', is_flag=True, help='Use the built-in demo repository instead of GitHub')


@click.group(name='studioflow')
@click.option('--debug', is_flag=True, help='Enable debug logging')
@click.version_option(version=__version__, prog_name='studioflow')
@click.pass_context
def main(ctx: click.Context, debug: bool) -> None:
    """
    Explore GitHub repositories and ask an AI about their code.

    Examples:

        studioflow analyze https://github.com/pallets/click

        studioflow show https://github.com/pallets/click README.md

        studioflow analyze --demo

        studioflow --debug summarize --demo demo src/lib/utils.ts
    """
    setup_logging(debug)
    ctx.obj = Config(debug=debug)


@main.command()
@click.argument('repo_url', required=False)
@demo_option
@click.option('--overview/--no-overview', default=False, help='Ask the AI for an architecture overview')
@click.option('--flat', is_flag=True, help='List file paths instead of the tree')
@click.pass_obj
@handle_errors
def analyze(config: Config, repo_url: Optional[str], demo: bool, overview: bool, flat: bool) -> None:
    """Fetch and print the file tree of REPO_URL."""
    console = ConsoleManager()
    explorer = _explore(config, _repo_arg(repo_url, demo), demo)
    tree = render_tree(explorer.nodes)

    console.print_heading("REPOSITORY:", explorer.adapter.repo_url)
    if explorer.adapter.branch:
        console.print_heading("BRANCH:", explorer.adapter.branch)
    if flat:
        for path, _ in iter_files(explorer.nodes):
            console.print_raw(path)
    else:
        console.print_raw(tree)
    console.print_heading("FILES:", str(explorer.total_files))

    if overview:
        client = LLMClient.from_env()
        result = run(generate_project_overview(client, explorer.adapter.repo_url, tree))
        console.print_heading("OVERVIEW:", "")
        console.print_raw(result.overview)


@main.command()
@click.argument('repo_url')
@click.argument('path')
@demo_option
@click.pass_obj
@handle_errors
def show(config: Config, repo_url: str, path: str, demo: bool) -> None:
    """Load and print the file at PATH."""
    console = ConsoleManager()
    explorer, node = _open(config, repo_url, path, demo)
    console.print_raw(node.content)
    console.print_heading("EXPLORED:", f"{explorer.progress}%")


@main.command()
@click.argument('repo_url')
@click.argument('path')
@demo_option
@click.pass_obj
@handle_errors
def summarize(config: Config, repo_url: str, path: str, demo: bool) -> None:
    """Summarize the file at PATH with the AI."""
    console = ConsoleManager()
    explorer, node = _open(config, repo_url, path, demo)
    client = LLMClient.from_env()
    summary = run(generate_file_summary(client, node.name, path, node.content,
                                        project_context=explorer.adapter.repo_url))

    console.print_heading("SUMMARY:", summary.summary)
    console.print_heading("PURPOSE:", summary.purpose)
    console.print_heading("COMPLEXITY:", summary.complexity)
    if summary.key_components:
        console.print_heading("KEY COMPONENTS:", ", ".join(summary.key_components))
    if summary.tags:
        console.print_heading("TAGS:", ", ".join(summary.tags))


def _parse_lines(lines: Optional[str], total: int) -> Tuple[int, int]:
    """``START:END`` (1-based, inclusive) to a slice."""
    if not lines:
        return 0, total
    try:
        start_text, _, end_text = lines.partition(':')
        start = int(start_text) if start_text else 1
        end = int(end_text) if end_text else total
    except ValueError:
        raise InvalidInputError(f"Invalid line range: {lines}") from None
    if start < 1 or end < start:
        raise InvalidInputError(f"Invalid line range: {lines}")
    return start - 1, min(end, total)


@main.command()
@click.argument('repo_url')
@click.argument('path')
@demo_option
@click.option('--lines', help='Line range to explain, e.g. 10:25')
@click.pass_obj
@handle_errors
def explain(config: Config, repo_url: str, path: str, demo: bool, lines: Optional[str]) -> None:
    """Explain the code at PATH in plain language."""
    console = ConsoleManager()
    explorer, node = _open(config, repo_url, path, demo)
    source_lines = node.content.splitlines()
    start, end = _parse_lines(lines, len(source_lines))

    client = LLMClient.from_env()
    result = run(explain_code_block(client, "\n".join(source_lines[start:end]), path,
                                    render_tree(explorer.nodes)))
    console.print_raw(result.explanation)


@main.command()
@click.argument('repo_url')
@click.argument('path')
@demo_option
@click.option('--language', help='Programming language (detected by the AI if omitted)')
@click.pass_obj
@handle_errors
def suggest(config: Config, repo_url: str, path: str, demo: bool, language: Optional[str]) -> None:
    """Ask the AI for improvement suggestions for PATH."""
    console = ConsoleManager()
    _, node = _open(config, repo_url, path, demo)
    client = LLMClient.from_env()
    result = run(generate_code_suggestions(client, node.content, path, language=language))

    console.print_heading("QUALITY:", result.overall_quality)
    console.print_raw(result.summary)
    for suggestion in result.suggestions:
        console.print(f"\n[highlight]{suggestion.priority.upper()}[/highlight] "
                      f"[dim]({suggestion.type})[/dim] ", end="")
        console.print_raw(suggestion.title)
        console.print_raw(suggestion.description)
        if suggestion.example:
            console.print_raw(suggestion.example)


@main.command()
@click.argument('repo_url')
@click.argument('left')
@click.argument('right')
@demo_option
@click.pass_obj
@handle_errors
def compare(config: Config, repo_url: str, left: str, right: str, demo: bool) -> None:
    """Line-by-line differences between LEFT and RIGHT."""
    console = ConsoleManager()
    explorer = _explore(config, repo_url, demo)
    left_node = run(explorer.select_path(left))
    right_node = run(explorer.select_path(right))

    console.print_heading(f"{left}:", format_file_size(len(left_node.content.encode('utf-8'))))
    console.print_heading(f"{right}:", format_file_size(len(right_node.content.encode('utf-8'))))

    differences = compare_lines(left_node.content, right_node.content)
    if not differences:
        console.print_success("Files are identical")
        return
    for difference in differences:
        console.print(f"[number]{difference.line}[/number]")
        console.print_raw(f"- {difference.left}")
        console.print_raw(f"+ {difference.right}")
    console.print_heading("DIFFERENT LINES:", str(len(differences)))


class _StreamPrinter:
    """Observer that echoes streamed text as it arrives."""

    def __init__(self, console: ConsoleManager):
        self.console = console
        self.printed = 0

    def __call__(self, state: SessionState) -> None:
        if state.status == SessionStatus.STREAMING:
            self.console.print_raw(state.partial[self.printed:], end="")
            self.printed = len(state.partial)
        elif self.printed:
            self.console.print_raw("")
            self.printed = 0


@main.command()
@click.option('--context-file', type=click.Path(exists=True, dir_okay=False, path_type=Path),
              help='File whose text is given to the AI as context')
@click.pass_obj
@handle_errors
def chat(config: Config, context_file: Optional[Path]) -> None:
    """Interactive chat. /retry re-sends, /reset clears, /exit quits."""
    console = ConsoleManager()
    context = context_file.read_text(encoding='utf-8') if context_file else None
    session = ChatSession(LLMClient.from_env(), context=context)
    session.subscribe(_StreamPrinter(console))

    while True:
        try:
            text = click.prompt(click.style("you", bold=True), prompt_suffix="> ")
        except click.Abort:
            break
        command = text.strip().lower()
        if command in ("/exit", "/quit"):
            break
        if command == "/reset":
            session.reset()
            console.print_info("Conversation cleared")
            continue

        try:
            if command == "/retry":
                state = run(session.retry())
            else:
                state = run(session.send(text))
        except KeyboardInterrupt:
            console.print_warning("Cancelled")
            continue
        except InvalidInputError as e:
            console.print_warning(e.message)
            continue

        if state.status == SessionStatus.ERROR:
            console.print_error(state.error or "Error")


@main.group()
def settings() -> None:
    """Show or change saved preferences."""


@settings.command('show')
@click.pass_obj
@handle_errors
def settings_show(config: Config) -> None:
    console = ConsoleManager()
    for name, value in LocalStore(config.store_path).load_settings().model_dump().items():
        console.print_heading(f"{name}:", json.dumps(value))


@settings.command('set')
@click.argument('name')
@click.argument('value')
@click.pass_obj
@handle_errors
def settings_set(config: Config, name: str, value: str) -> None:
    """Set NAME (e.g. code_viewer_font_size) to VALUE."""
    try:
        parsed = json.loads(value)
    except json.JSONDecodeError:
        parsed = value
    updated = LocalStore(config.store_path).update_settings(**{name.replace('-', '_'): parsed})
    ConsoleManager().print_success(f"{name} = {json.dumps(getattr(updated, name.replace('-', '_')))}")


@settings.command('reset')
@click.pass_obj
@handle_errors
def settings_reset(config: Config) -> None:
    LocalStore(config.store_path).reset_settings()
    ConsoleManager().print_success("Settings restored to defaults")


@main.group()
def annotate() -> None:
    """Notes attached to files."""


@annotate.command('add')
@click.argument('file_path')
@click.argument('content')
@click.option('--author', required=True, help='Name shown with the note')
@click.option('--line', 'line_number', type=int, default=1, show_default=True)
@click.pass_obj
@handle_errors
def annotate_add(config: Config, file_path: str, content: str, author: str, line_number: int) -> None:
    annotation = LocalStore(config.store_path).add_annotation(file_path, author, content, line_number)
    ConsoleManager().print_success(f"Annotation {annotation.id} added to {file_path}:{line_number}")


@annotate.command('list')
@click.argument('file_path')
@click.pass_obj
@handle_errors
def annotate_list(config: Config, file_path: str) -> None:
    console = ConsoleManager()
    annotations = LocalStore(config.store_path).list_annotations(file_path)
    if not annotations:
        console.print_info(f"No annotations for {file_path}")
        return
    for annotation in annotations:
        console.print(f"[number]{annotation.line_number}[/number] [dim]{annotation.id}[/dim] "
                      f"[highlight]{annotation.author}[/highlight]: ", end="")
        console.print_raw(annotation.content)


@annotate.command('delete')
@click.argument('file_path')
@click.argument('annotation_id')
@click.pass_obj
@handle_errors
def annotate_delete(config: Config, file_path: str, annotation_id: str) -> None:
    if not LocalStore(config.store_path).delete_annotation(file_path, annotation_id):
        raise InvalidInputError(f"No annotation {annotation_id} for {file_path}")
    ConsoleManager().print_success("Annotation deleted")


if __name__ == '__main__':
    main()

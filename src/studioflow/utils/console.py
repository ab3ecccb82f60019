"""Themed console output for the CLI."""

import sys
from enum import Enum
from typing import Optional, TextIO

from rich.console import Console
from rich.text import Text
from rich.theme import Theme


class StatusType(Enum):
    """Standard status types with associated symbols."""
    SUCCESS = ("[✓]", "success")
    ERROR = ("[x]", "error")
    WARNING = ("[!]", "warning")
    INFO = ("[i]", "info")


THEMES = {
    'studio': {
        'info': 'cyan',
        'warning': 'yellow',
        'error': 'bold red',
        'success': 'green',
        'highlight': 'bright_cyan',
        'heading': 'bold bright_yellow',
        'path': 'white',
        'number': 'bright_blue',
        'dim': 'bright_black',
        'user': 'bold bright_green',
        'assistant': 'bold bright_cyan',
    },
    'plain': {
        'info': 'default',
        'warning': 'default',
        'error': 'bold',
        'success': 'default',
        'highlight': 'bold',
        'heading': 'bold',
        'path': 'default',
        'number': 'default',
        'dim': 'dim',
        'user': 'bold',
        'assistant': 'bold',
    },
}


class ConsoleManager:
    """Rich console with the StudioFlow theme and a few status helpers."""

    def __init__(self, theme: str = 'studio', file: Optional[TextIO] = None):
        self.theme_name = theme if theme in THEMES else 'studio'
        self.console = Console(
            theme=Theme(THEMES[self.theme_name]),
            file=file or sys.stdout,
            highlight=False,
        )

    def print(self, *args, **kwargs):
        self.console.print(*args, **kwargs)

    def print_raw(self, text: str, end: str = "\n"):
        """Print text verbatim: no markup, no wrapping."""
        self.console.print(text, markup=False, highlight=False, soft_wrap=True, end=end)

    def print_status(self, status: StatusType, message: str):
        icon, style = status.value
        line = Text()
        line.append(f"{icon} ", style=style)
        line.append(message)
        self.console.print(line, soft_wrap=True)

    def print_error(self, message: str):
        self.print_status(StatusType.ERROR, message)

    def print_success(self, message: str):
        self.print_status(StatusType.SUCCESS, message)

    def print_warning(self, message: str):
        self.print_status(StatusType.WARNING, message)

    def print_info(self, message: str):
        self.print_status(StatusType.INFO, message)

    def print_heading(self, heading: str, value: str):
        """``heading`` in the heading style followed by a plain value."""
        line = Text()
        line.append(heading, style="heading")
        line.append(f" {value}")
        self.console.print(line, soft_wrap=True)

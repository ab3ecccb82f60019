"""
Core data models for studioflow.

This module contains the fundamental data structures used throughout
the application: configuration, the repository tree and the records
exchanged with repository adapters.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple, Union
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


@dataclass
class Config:
    """Configuration settings for studioflow."""

    github_token: str = field(default_factory=lambda: os.getenv('GITHUB_TOKEN', ''))
    github_api_url: str = "https://api.github.com"

    # GitHub's contents API refuses blobs above 1MB
    max_file_size: int = 1024 * 1024

    # Encoding fallbacks for decoded file bytes
    encoding_fallbacks: List[str] = field(default_factory=lambda: [
        'utf-8', 'utf-8-sig', 'latin-1', 'cp1252'
    ])

    # Network settings
    request_timeout: float = 30.0
    connection_limit: int = 20
    connection_limit_per_host: int = 10

    # Demo dataset: seconds to wait before returning simulated content
    demo_delay: float = 0.0

    # Local store for settings and annotations
    store_path: Path = field(default_factory=lambda: Path(
        os.getenv('STUDIOFLOW_HOME', str(Path.home() / '.studioflow'))
    ))

    debug: bool = False


@dataclass(frozen=True)
class FileNode:
    """A file leaf. ``content`` is real text or a placeholder marker."""

    id: str
    name: str
    content: str

    @property
    def type(self) -> str:
        return 'file'

    def is_file(self) -> bool:
        return True

    def is_folder(self) -> bool:
        return False


@dataclass(frozen=True)
class FolderNode:
    """A folder. ``children`` keeps the order of the remote listing."""

    id: str
    name: str
    children: Tuple['TreeNode', ...] = ()

    @property
    def type(self) -> str:
        return 'folder'

    def is_file(self) -> bool:
        return False

    def is_folder(self) -> bool:
        return True


TreeNode = Union[FileNode, FolderNode]


@dataclass(frozen=True)
class RemoteEntry:
    """One record of a recursive remote tree listing.

    ``kind`` is ``blob`` for files and ``tree`` for directories; other
    kinds (e.g. ``commit`` for submodules) are ignored by the builder.
    """

    path: str
    kind: str
    id: str


@dataclass
class FileContent:
    """Decoded content of a single remote file."""

    content: str
    encoding: str = 'utf-8'
    size: int = 0


@dataclass
class LineDifference:
    """A line that differs between two files (1-based line number)."""

    line: int
    left: str
    right: str


@dataclass
class RepositorySnapshot:
    """Result of loading a repository: the tree plus where it came from."""

    repo_url: str
    nodes: List[TreeNode]
    total_files: int
    branch: Optional[str] = None

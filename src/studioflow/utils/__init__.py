"""Utility modules for studioflow."""

from .path_utils import PathUtils
from .tree_builder import FileTreeBuilder
from .compare import compare_lines, format_file_size
from .url import is_valid_repo_url, normalize_repo_url

__all__ = [
    "PathUtils",
    "FileTreeBuilder",
    "compare_lines",
    "format_file_size",
    "is_valid_repo_url",
    "normalize_repo_url",
]

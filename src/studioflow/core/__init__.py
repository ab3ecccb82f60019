"""Core components for studioflow."""

from .errors import (
    ErrorKind,
    InvalidInputError,
    NetworkError,
    NotFoundError,
    RateLimitedError,
    StudioFlowError,
    TooLargeError,
)
from .models import Config, FileNode, FolderNode, RemoteEntry, TreeNode
from .tree import count_files, is_placeholder, update_content
from .progress import mark_visited, progress
from .loader import load_content

__all__ = [
    "Config",
    "FileNode",
    "FolderNode",
    "RemoteEntry",
    "TreeNode",
    "count_files",
    "is_placeholder",
    "update_content",
    "mark_visited",
    "progress",
    "load_content",
    "ErrorKind",
    "StudioFlowError",
    "NotFoundError",
    "RateLimitedError",
    "TooLargeError",
    "NetworkError",
    "InvalidInputError",
]

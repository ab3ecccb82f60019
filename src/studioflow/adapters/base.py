"""
Base repository adapter interface.

This module defines the abstract interface that all repository adapters
must implement, ensuring consistent behavior across repository sources.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..core.models import Config, FileContent, TreeNode


class RepositoryAdapter(ABC):
    """
    Abstract base class for repository adapters.

    Adapters build the initial tree with placeholder contents and fetch
    real file text on demand. Failures are raised as StudioFlowError
    subclasses; adapters never return partially built trees.
    """

    def __init__(self, repo_url: str, config: Config):
        """Initialize adapter with the repository URL and configuration."""
        self.repo_url = repo_url
        self.config = config
        self.branch: Optional[str] = None

    @abstractmethod
    def get_name(self) -> str:
        """Get the repository name."""
        pass

    @abstractmethod
    def fetch_tree(self) -> List[TreeNode]:
        """
        Build the repository tree with placeholder file contents.

        Returns:
            Root-level TreeNodes.
        """
        pass

    @abstractmethod
    async def fetch_file_content(self, file_path: str, file_id: str) -> FileContent:
        """
        Fetch the content of one file.

        Args:
            file_path: Slash-separated path relative to the repository root.
            file_id: Content-addressed id of the file (blob sha).

        Returns:
            FileContent with the decoded text.
        """
        pass

    async def fetch_text(self, file_path: str, file_id: str) -> str:
        """Fetch only the text, in the shape ``load_content`` expects."""
        result = await self.fetch_file_content(file_path, file_id)
        return result.content

    def _sanitize_error(self, error: str, sensitive_data: Optional[List[str]] = None) -> str:
        """Remove sensitive data from error messages."""
        if not sensitive_data:
            return error

        sanitized = error
        for sensitive in sensitive_data:
            if sensitive:
                sanitized = sanitized.replace(str(sensitive), "[REDACTED]")
        return sanitized

"""
Repository exploration session.

Holds the current tree snapshot and the set of visited files, and
implements the file selection action: mark the file visited, then load
its content on demand when it is still a placeholder.
"""

import asyncio
import logging
from typing import FrozenSet, List, Optional

from ..adapters.base import RepositoryAdapter
from .errors import InvalidInputError, NotFoundError
from .loader import load_content
from .models import FileNode, RepositorySnapshot, TreeNode
from .progress import mark_visited, progress
from .tree import count_files, find_by_path, find_file_path, find_node

logger = logging.getLogger(__name__)


class RepositoryExplorer:
    """Tree snapshot, visited set and lazy loading for one repository."""

    def __init__(self, adapter: RepositoryAdapter):
        self.adapter = adapter
        self.nodes: List[TreeNode] = []
        self.visited: FrozenSet[str] = frozenset()

    @property
    def total_files(self) -> int:
        return count_files(self.nodes)

    @property
    def progress(self) -> int:
        """Percentage of files opened since the tree was loaded."""
        return progress(self.visited, self.total_files)

    async def load(self) -> RepositorySnapshot:
        """
        Fetch the repository tree, replacing any previous one.

        The previous tree and visited set are kept if the fetch fails.
        """
        nodes = await asyncio.to_thread(self.adapter.fetch_tree)
        self.nodes = nodes
        self.visited = frozenset()
        logger.info("Loaded %d files from %s", self.total_files, self.adapter.repo_url)
        return RepositorySnapshot(
            repo_url=self.adapter.repo_url,
            nodes=nodes,
            total_files=self.total_files,
            branch=self.adapter.branch,
        )

    async def select_file(self, file_id: str) -> FileNode:
        """
        Open a file: record it as visited and make sure its content is loaded.

        Raises:
            InvalidInputError: If ``file_id`` is not a file of the current tree.
            StudioFlowError: Fetch failures, with the tree left unchanged.
        """
        node = find_node(self.nodes, file_id)
        if not isinstance(node, FileNode):
            raise InvalidInputError(f"No file with id {file_id} in the current tree")

        self.visited = mark_visited(self.visited, file_id)

        path = find_file_path(self.nodes, file_id)
        self.nodes, _ = await load_content(self.nodes, file_id, self.adapter.fetch_text, path)
        return find_node(self.nodes, file_id)

    async def select_path(self, path: str) -> FileNode:
        """Open a file by its repository path."""
        node = self.resolve_path(path)
        return await self.select_file(node.id)

    def resolve_path(self, path: str) -> FileNode:
        """Find the file at ``path`` in the current tree."""
        node: Optional[TreeNode] = find_by_path(self.nodes, path)
        if node is None:
            raise NotFoundError(f"File not found: {path}")
        if not isinstance(node, FileNode):
            raise InvalidInputError(f"{path} is a folder, not a file")
        return node

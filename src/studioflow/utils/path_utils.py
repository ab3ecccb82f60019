"""Path helpers for slash-separated repository paths."""

from typing import List, Tuple


class PathUtils:
    """Utilities for consistent path handling across platforms."""

    @staticmethod
    def normalize_path(path: str) -> str:
        """
        Normalize path separators to forward slashes.

        Args:
            path: File path with potentially mixed separators

        Returns:
            Path with forward slashes only
        """
        return path.replace('\\\\', '/').replace('\\', '/')

    @staticmethod
    def normalize_and_split(path: str) -> List[str]:
        """Normalize path and split into non-empty components."""
        return [part for part in PathUtils.normalize_path(path).split('/') if part]

    @staticmethod
    def split_parent(path: str) -> Tuple[str, str]:
        """
        Split a path into its parent path and last segment.

        Returns:
            Tuple of (parent_path, name); parent_path is "" for root entries.
        """
        parts = PathUtils.normalize_and_split(path)
        if not parts:
            return "", ""
        return '/'.join(parts[:-1]), parts[-1]

    @staticmethod
    def depth(path: str) -> int:
        """Number of segments in ``path``."""
        return len(PathUtils.normalize_and_split(path))

    @staticmethod
    def strip_leading_slash(path: str) -> str:
        return path[1:] if path.startswith('/') else path

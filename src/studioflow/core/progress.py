"""Exploration progress: which files of the current tree have been opened."""

from typing import AbstractSet, FrozenSet


def mark_visited(visited: AbstractSet[str], node_id: str) -> FrozenSet[str]:
    """Return a new visited set that also contains ``node_id``."""
    if node_id in visited:
        return frozenset(visited)
    return frozenset(visited) | {node_id}


def progress(visited: AbstractSet[str], total_files: int) -> int:
    """Percentage of files visited, rounded to the nearest integer.

    Only ids taken from the current tree may be marked, so the result
    stays within 0-100.
    """
    if total_files == 0:
        return 0
    # round half up, not half to even
    return min(100, int(100 * len(visited) / total_files + 0.5))

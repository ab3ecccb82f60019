"""
Pure functions over repository tree snapshots.

A snapshot is a sequence of root-level ``TreeNode`` values. Nothing in
this module mutates a node: updates rebuild the path from the root to
the changed file and share every untouched subtree.
"""

from dataclasses import replace
from typing import Iterator, List, Optional, Sequence, Tuple

from .models import FileNode, FolderNode, TreeNode

PLACEHOLDER_SENTINEL = "will be loaded on demand."


def placeholder_for(path: str) -> str:
    """Build the placeholder content for a file that has not been fetched yet."""
    return f"// Content for {path} {PLACEHOLDER_SENTINEL}"


def is_placeholder(content: str) -> bool:
    """Check whether ``content`` is a not-yet-loaded marker."""
    return PLACEHOLDER_SENTINEL in content


def count_files(nodes: Sequence[TreeNode]) -> int:
    """Count file leaves at any depth."""
    count = 0
    for node in nodes:
        if isinstance(node, FileNode):
            count += 1
        else:
            count += count_files(node.children)
    return count


def _update_node(node: TreeNode, target_id: str, new_content: str) -> TreeNode:
    if isinstance(node, FileNode):
        if node.id == target_id:
            return replace(node, content=new_content)
        return node

    children = tuple(_update_node(child, target_id, new_content) for child in node.children)
    # Keep the same folder object when nothing below it changed
    if all(new is old for new, old in zip(children, node.children)):
        return node
    return replace(node, children=children)


def update_content(nodes: Sequence[TreeNode], target_id: str, new_content: str) -> List[TreeNode]:
    """
    Return a new snapshot where the file ``target_id`` has ``new_content``.

    Every other node is passed through by reference. An unknown id yields
    an equal snapshot.
    """
    return [_update_node(node, target_id, new_content) for node in nodes]


def find_node(nodes: Sequence[TreeNode], node_id: str) -> Optional[TreeNode]:
    """Pre-order search for the node with ``node_id``."""
    for node in nodes:
        if node.id == node_id:
            return node
        if isinstance(node, FolderNode):
            found = find_node(node.children, node_id)
            if found is not None:
                return found
    return None


def find_file_path(nodes: Sequence[TreeNode], node_id: str, base: str = "") -> Optional[str]:
    """Slash-joined path of ``node_id`` relative to the repository root."""
    for node in nodes:
        path = f"{base}/{node.name}" if base else node.name
        if node.id == node_id:
            return path
        if isinstance(node, FolderNode):
            found = find_file_path(node.children, node_id, path)
            if found is not None:
                return found
    return None


def find_by_path(nodes: Sequence[TreeNode], path: str) -> Optional[TreeNode]:
    """Walk the tree segment by segment to the node at ``path``."""
    current: Sequence[TreeNode] = nodes
    node: Optional[TreeNode] = None
    for segment in path.strip('/').split('/'):
        node = next((child for child in current if child.name == segment), None)
        if node is None:
            return None
        current = node.children if isinstance(node, FolderNode) else ()
    return node


def iter_files(nodes: Sequence[TreeNode], base: str = "") -> Iterator[Tuple[str, FileNode]]:
    """Yield ``(path, file_node)`` pairs in pre-order."""
    for node in nodes:
        path = f"{base}/{node.name}" if base else node.name
        if isinstance(node, FileNode):
            yield path, node
        else:
            yield from iter_files(node.children, path)


def render_tree(nodes: Sequence[TreeNode]) -> str:
    """Render the snapshot with tree connectors, one node per line."""
    lines: List[str] = []

    def format_recursive(children: Sequence[TreeNode], prefix: str) -> None:
        for i, node in enumerate(children):
            is_last = i == len(children) - 1
            connector = "└── " if is_last else "├── "
            if isinstance(node, FolderNode):
                lines.append(f"{prefix}{connector}{node.name}/")
                extension = "    " if is_last else "│   "
                format_recursive(node.children, prefix + extension)
            else:
                lines.append(f"{prefix}{connector}{node.name}")

    format_recursive(list(nodes), "")
    return "\n".join(lines)

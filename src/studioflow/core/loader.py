"""On-demand loading of file content into a tree snapshot."""

import logging
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple

from .models import FileNode, TreeNode
from .tree import find_file_path, find_node, is_placeholder, update_content

logger = logging.getLogger(__name__)

# fetch_fn(path, file_id) -> real file text
FetchFn = Callable[[str, str], Awaitable[str]]


async def load_content(
    nodes: Sequence[TreeNode],
    file_id: str,
    fetch_fn: FetchFn,
    path: Optional[str] = None,
) -> Tuple[List[TreeNode], Optional[str]]:
    """
    Replace the placeholder content of ``file_id`` with fetched text.

    Args:
        nodes: Current tree snapshot.
        file_id: Id of a file node in ``nodes``.
        fetch_fn: Coroutine that retrieves the real text for a path.
        path: Repository path of the file; resolved from the tree if omitted.

    Returns:
        Tuple of (snapshot, content). When the node is missing or already
        loaded, the input snapshot and the node's current content (``None``
        for a missing node) are returned without calling ``fetch_fn``.

    Raises:
        StudioFlowError: Whatever ``fetch_fn`` raises, unchanged. The input
        snapshot is left as it was so the caller can retry.
    """
    node = find_node(nodes, file_id)
    if not isinstance(node, FileNode):
        logger.debug("No file node with id %s, nothing to load", file_id)
        return list(nodes), None
    if not is_placeholder(node.content):
        return list(nodes), node.content

    if path is None:
        path = find_file_path(nodes, file_id)

    logger.debug("Loading content for %s (%s)", path, file_id)
    content = await fetch_fn(path, file_id)
    return update_content(nodes, file_id, content), content

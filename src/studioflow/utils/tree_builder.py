"""Tree building from a flat remote listing."""

import logging
from typing import Dict, Iterable, List, Tuple

from ..core.models import FileNode, FolderNode, RemoteEntry, TreeNode
from ..core.tree import placeholder_for
from .path_utils import PathUtils

logger = logging.getLogger(__name__)


class FileTreeBuilder:
    """Utilities for building tree snapshots from remote listings."""

    @staticmethod
    def sort_entries(entries: Iterable[RemoteEntry]) -> List[RemoteEntry]:
        """Order entries so that every parent precedes its children.

        Sorting by segment count first holds for any character set; plain
        lexicographic order breaks when a sibling name sorts below '/'
        (e.g. ``a-b`` vs ``a/x``).
        """
        return sorted(entries, key=lambda e: (PathUtils.depth(e.path), e.path))

    @staticmethod
    def from_entries(entries: Iterable[RemoteEntry]) -> List[TreeNode]:
        """
        Build root-level nodes from a recursive listing.

        Files get placeholder content instead of their bytes. Entries of
        unknown kind, or with no path or id, are skipped, as are entries
        whose parent folder is not part of the listing.

        Args:
            entries: Records with slash-separated paths, ``blob``/``tree``
                kinds and content-addressed ids.

        Returns:
            Root-level TreeNodes, children in listing order.
        """
        # Folder path -> (id, name); children are collected per parent path
        folders: Dict[str, Tuple[str, str]] = {}
        children: Dict[str, List[object]] = {"": []}

        for entry in FileTreeBuilder.sort_entries(entries):
            if not entry.path or not entry.id:
                continue
            if entry.kind not in ('blob', 'tree'):
                logger.debug("Skipping %s entry %s", entry.kind, entry.path)
                continue

            path = PathUtils.normalize_path(entry.path).strip('/')
            parent_path, name = PathUtils.split_parent(path)
            if parent_path not in children:
                logger.debug("Parent of %s missing from listing, skipping", path)
                continue

            if entry.kind == 'tree':
                folders[path] = (entry.id, name)
                children[path] = []
                children[parent_path].append(path)
            else:
                children[parent_path].append(
                    FileNode(id=entry.id, name=name, content=placeholder_for(path))
                )

        def freeze(parent_path: str) -> Tuple[TreeNode, ...]:
            frozen = []
            for child in children[parent_path]:
                if isinstance(child, FileNode):
                    frozen.append(child)
                else:
                    folder_id, folder_name = folders[child]
                    frozen.append(FolderNode(id=folder_id, name=folder_name, children=freeze(child)))
            return tuple(frozen)

        return list(freeze(""))

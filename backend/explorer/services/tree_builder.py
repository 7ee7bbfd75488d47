"""Recursive directory tree snapshots."""

from __future__ import annotations

import logging
import posixpath
import stat

from explorer.exceptions import DirectoryUnavailable
from explorer.schemas.files import FolderInfo, Node, TreeResponse
from explorer.services.fs_walk import (
    SYMLINK_LOOP,
    Entry,
    file_node,
    folder_node,
    list_entries,
    modified_at,
)
from explorer.services.path_resolver import PathResolver, ResolvedPath, join_relative

logger = logging.getLogger(__name__)

ROOT_LABEL = "Root"


class TreeBuilder:
    """Builds a fully expanded, sorted tree of a directory's contents.

    Nothing is cached: every call re-walks the filesystem. A nested folder
    that cannot be read is reported with empty ``children`` and an ``error``
    instead of failing the whole walk; only the requested directory itself
    raises :class:`DirectoryUnavailable`.
    """

    def __init__(self, resolver: PathResolver, follow_symlinks: bool = True):
        self._resolver = resolver
        self._follow_symlinks = follow_symlinks

    def build(self, target: ResolvedPath) -> list[Node]:
        """Return the sorted children of ``target``, folders fully expanded."""
        return self.snapshot(target).tree

    def snapshot(self, target: ResolvedPath) -> TreeResponse:
        """Tree plus metadata about the requested folder itself."""
        try:
            st = target.absolute.stat()
        except OSError as exc:
            logger.warning("Cannot stat %s: %s", target.absolute, exc)
            raise DirectoryUnavailable("Unable to read directory") from exc
        if not stat.S_ISDIR(st.st_mode):
            logger.info("Tree requested for non-directory %s", target.absolute)
            raise DirectoryUnavailable("Unable to read directory")

        try:
            entries = list_entries(target.absolute, self._resolver, self._follow_symlinks)
        except OSError as exc:
            logger.warning("Cannot list %s: %s", target.absolute, exc)
            raise DirectoryUnavailable("Unable to read directory") from exc

        tree = self._nodes(entries, target.relative, frozenset({(st.st_dev, st.st_ino)}))
        folder = FolderInfo(
            name=posixpath.basename(target.relative) if not target.is_root else ROOT_LABEL,
            path=target.relative,
            modified=modified_at(st),
            item_count=len(tree),
        )
        return TreeResponse(tree=tree, current_folder=folder)

    def _nodes(
        self,
        entries: list[Entry],
        relative: str,
        ancestors: frozenset[tuple[int, int]],
    ) -> list[Node]:
        nodes = []
        for entry in entries:
            child_path = join_relative(relative, entry.name)
            if entry.is_dir:
                nodes.append(self._folder(entry, child_path, ancestors))
            else:
                nodes.append(file_node(entry, child_path))
        return nodes

    def _folder(
        self,
        entry: Entry,
        relative: str,
        ancestors: frozenset[tuple[int, int]],
    ) -> Node:
        if entry.inode_key in ancestors:
            logger.warning("Not descending into %s: symlink loop", entry.path)
            return folder_node(entry, relative, size=0, error=SYMLINK_LOOP)
        try:
            entries = list_entries(entry.path, self._resolver, self._follow_symlinks)
        except OSError as exc:
            logger.warning("Cannot read %s: %s", entry.path, exc)
            return folder_node(entry, relative, size=0, error=exc.strerror or str(exc))
        children = self._nodes(entries, relative, ancestors | {entry.inode_key})
        return folder_node(entry, relative, children)

"""Bounded substring search over file and folder names."""

from __future__ import annotations

import logging
import stat

from explorer.exceptions import DirectoryUnavailable
from explorer.schemas.files import Node
from explorer.services.fs_walk import Entry, file_node, folder_node, list_entries
from explorer.services.path_resolver import PathResolver, ResolvedPath, join_relative

logger = logging.getLogger(__name__)

MAX_DEPTH = 10
MAX_RESULTS = 100


class SearchEngine:
    """Depth-first, case-insensitive name search.

    Results come back in traversal order and stop at ``max_results``; this
    is a cap, not a ranking. Directories nested deeper than ``max_depth``
    below the search root are not listed, and unreadable directories are
    skipped without comment.
    """

    def __init__(
        self,
        resolver: PathResolver,
        max_depth: int = MAX_DEPTH,
        max_results: int = MAX_RESULTS,
        follow_symlinks: bool = True,
    ):
        self._resolver = resolver
        self._max_depth = max_depth
        self._max_results = max_results
        self._follow_symlinks = follow_symlinks

    def search(self, target: ResolvedPath, query: str) -> list[Node]:
        if not query.strip():
            return []
        needle = query.casefold()

        try:
            st = target.absolute.stat()
            if not stat.S_ISDIR(st.st_mode):
                raise NotADirectoryError(str(target.absolute))
            entries = list_entries(target.absolute, self._resolver, self._follow_symlinks)
        except OSError as exc:
            logger.warning("Search root %s unavailable: %s", target.absolute, exc)
            raise DirectoryUnavailable("Search failed") from exc

        results: list[Node] = []
        self._walk(entries, target.relative, needle, 0, frozenset({(st.st_dev, st.st_ino)}), results)
        logger.debug("Search %r under %r: %d results", query, target.relative, len(results))
        return results

    def _walk(
        self,
        entries: list[Entry],
        relative: str,
        needle: str,
        depth: int,
        ancestors: frozenset[tuple[int, int]],
        results: list[Node],
    ) -> None:
        for entry in entries:
            if len(results) >= self._max_results:
                return
            child_path = join_relative(relative, entry.name)
            matches = needle in entry.name.casefold()

            if not entry.is_dir:
                if matches:
                    results.append(file_node(entry, child_path))
                continue

            if entry.inode_key in ancestors:
                continue
            children = None
            if matches or depth < self._max_depth:
                try:
                    children = list_entries(entry.path, self._resolver, self._follow_symlinks)
                except OSError as exc:
                    logger.debug("Skipping unreadable %s: %s", entry.path, exc)

            if matches:
                results.append(folder_node(entry, child_path, size=len(children or [])))
            if children is not None and depth < self._max_depth:
                self._walk(
                    children, child_path, needle, depth + 1,
                    ancestors | {entry.inode_key}, results,
                )

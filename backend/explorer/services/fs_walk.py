"""Directory listing shared by the tree, search and archive services."""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

from explorer.schemas.files import Node
from explorer.services.path_resolver import PathResolver

logger = logging.getLogger(__name__)

SYMLINK_LOOP = "Symbolic link loop"


@dataclass
class Entry:
    """A listed directory entry, already stat'ed (symlinks followed)."""
    name: str
    path: Path
    is_dir: bool
    stat: os.stat_result

    @property
    def inode_key(self) -> tuple[int, int]:
        return self.stat.st_dev, self.stat.st_ino


def sort_key(entry: Entry) -> tuple[bool, str, str]:
    """Folders first, then case-insensitive name, exact name as tiebreak."""
    return (not entry.is_dir, entry.name.casefold(), entry.name)


def list_entries(
    directory: Path,
    resolver: PathResolver,
    follow_symlinks: bool = True,
) -> list[Entry]:
    """List regular files and directories in ``directory``, sorted.

    Raises ``OSError`` when the directory itself cannot be read. Entries
    that vanish or fail to stat mid-listing are dropped. So are special
    files and symlinks that dangle or leave the root.
    """
    entries: list[Entry] = []
    with os.scandir(directory) as it:
        for dirent in it:
            try:
                if dirent.is_symlink():
                    if not follow_symlinks or not resolver.is_safe_link(dirent.path):
                        logger.debug("Skipping symlink %s", dirent.path)
                        continue
                st = dirent.stat()
            except OSError as exc:
                logger.debug("Skipping %s: %s", dirent.path, exc)
                continue
            if stat.S_ISDIR(st.st_mode):
                entries.append(Entry(dirent.name, Path(dirent.path), True, st))
            elif stat.S_ISREG(st.st_mode):
                entries.append(Entry(dirent.name, Path(dirent.path), False, st))
    entries.sort(key=sort_key)
    return entries


def modified_at(st: os.stat_result) -> datetime:
    return datetime.fromtimestamp(st.st_mtime, tz=timezone.utc)


def file_extension(name: str) -> str | None:
    """Lowercase extension with its leading dot, or None."""
    ext = os.path.splitext(name)[1]
    return ext.lower() if ext else None


def file_node(entry: Entry, relative: str) -> Node:
    return Node(
        name=entry.name,
        type="file",
        path=relative,
        size=entry.stat.st_size,
        modified=modified_at(entry.stat),
        extension=file_extension(entry.name),
    )


def folder_node(
    entry: Entry,
    relative: str,
    children: list[Node] | None = None,
    size: int | None = None,
    error: str | None = None,
) -> Node:
    children = children if children is not None else []
    return Node(
        name=entry.name,
        type="folder",
        path=relative,
        size=len(children) if size is None else size,
        modified=modified_at(entry.stat),
        children=children,
        error=error,
    )

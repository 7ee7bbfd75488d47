"""Confine client-supplied relative paths to the configured root."""

from __future__ import annotations

import logging
import os
import posixpath
from dataclasses import dataclass
from pathlib import Path, PureWindowsPath

from explorer.exceptions import InvalidPath

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedPath:
    """An absolute path inside the root plus its normalized relative form."""
    absolute: Path
    relative: str  # "" for the root itself

    @property
    def is_root(self) -> bool:
        return self.relative == ""


def join_relative(parent: str, name: str) -> str:
    """Relative path of entry ``name`` inside the folder at ``parent``."""
    return f"{parent}/{name}" if parent else name


class PathResolver:
    """Resolves relative paths against a fixed root directory.

    Every filesystem read in the explorer goes through :meth:`resolve`
    first, so this class is the traversal boundary for the whole service.
    """

    def __init__(self, root: str | os.PathLike[str]):
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        return self._root

    def resolve(self, relative: str | None) -> ResolvedPath:
        """Validate ``relative`` and return where it points inside the root.

        Accepts either separator. Absolute paths, drive letters, NUL bytes
        and anything that normalizes to a location above the root are
        rejected with :class:`InvalidPath`, as are symlinks whose real
        target lies outside the root.
        """
        raw = (relative or "").replace("\\", "/")
        if "\x00" in raw:
            raise InvalidPath("Invalid path")
        if raw.startswith("/") or PureWindowsPath(raw).drive:
            logger.info("Rejected absolute path %r", relative)
            raise InvalidPath("Invalid path")

        # Only an empty path means the root; "   " is a legal folder name
        normalized = posixpath.normpath(raw) if raw else "."
        if normalized == ".":
            normalized = ""
        if normalized == ".." or normalized.startswith("../"):
            logger.info("Rejected path escaping root: %r", relative)
            raise InvalidPath("Invalid path")

        candidate = (self._root / normalized).resolve()
        if not self.contains(candidate):
            logger.info("Rejected path resolving outside root: %r", relative)
            raise InvalidPath("Invalid path")
        return ResolvedPath(absolute=candidate, relative=normalized)

    def contains(self, path: Path) -> bool:
        """True if the already-resolved ``path`` is the root or below it."""
        return path == self._root or self._root in path.parents

    def is_safe_link(self, path: str | os.PathLike[str]) -> bool:
        """True if a symlink's real target exists and stays inside the root."""
        try:
            target = Path(path).resolve(strict=True)
        except (OSError, RuntimeError):
            return False
        return self.contains(target)

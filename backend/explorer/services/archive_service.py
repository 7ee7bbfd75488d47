"""Zip archives of whole folders, streamed while they are being built."""

from __future__ import annotations

import asyncio
import logging
import os
import posixpath
import queue
import tempfile
import threading
import zipfile
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, BinaryIO, Iterator

from explorer.exceptions import ArchiveFailure, NotFound
from explorer.services.fs_walk import list_entries
from explorer.services.path_resolver import PathResolver, ResolvedPath, join_relative

logger = logging.getLogger(__name__)

ARCHIVE_EXTENSION = ".zip"
DEFAULT_ARCHIVE_NAME = "files.zip"
DEFAULT_CHUNK_SIZE = 64 * 1024
QUEUE_DEPTH = 8


class ArchiveCancelled(Exception):
    """The consumer went away; the producer should stop writing."""


@dataclass
class _EndOfArchive:
    error: BaseException | None = None


class _ChunkQueue:
    """Write-only file object feeding fixed-size chunks into a bounded queue.

    ``write`` blocks while the queue is full, which is what pauses the
    directory walk and the compressor when the client reads slowly.
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE, depth: int = QUEUE_DEPTH):
        self._chunk_size = chunk_size
        self._queue: queue.Queue[bytes | _EndOfArchive] = queue.Queue(maxsize=depth)
        self._buffer = bytearray()
        self._cancelled = threading.Event()

    def write(self, data: bytes) -> int:
        if self._cancelled.is_set():
            raise ArchiveCancelled()
        self._buffer += data
        while len(self._buffer) >= self._chunk_size:
            chunk = bytes(self._buffer[: self._chunk_size])
            del self._buffer[: self._chunk_size]
            self._put(chunk)
        return len(data)

    def flush(self) -> None:
        pass

    def finish(self, error: BaseException | None = None) -> None:
        """Send any buffered tail and the end marker."""
        try:
            if error is None and self._buffer:
                self._put(bytes(self._buffer))
            self._buffer.clear()
            self._put(_EndOfArchive(error))
        except ArchiveCancelled:
            # Wake a consumer still blocked in get()
            try:
                self._queue.put_nowait(_EndOfArchive())
            except queue.Full:
                pass

    def get(self) -> bytes | _EndOfArchive:
        return self._queue.get()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def _put(self, item: bytes | _EndOfArchive) -> None:
        while True:
            if self._cancelled.is_set():
                raise ArchiveCancelled()
            try:
                self._queue.put(item, timeout=0.25)
                return
            except queue.Full:
                continue


class ArchiveStreamer:
    """Builds deflate-compressed zip archives of a folder's recursive contents.

    Entry names are relative to the requested folder. Empty directories are
    stored as directory entries; non-empty ones are implied by their files.
    """

    def __init__(
        self,
        resolver: PathResolver,
        default_name: str = DEFAULT_ARCHIVE_NAME,
        compress_level: int = 9,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        follow_symlinks: bool = True,
    ):
        self._resolver = resolver
        self._default_name = default_name
        self._compress_level = compress_level
        self._chunk_size = chunk_size
        self._follow_symlinks = follow_symlinks

    def archive_name(self, target: ResolvedPath) -> str:
        if target.is_root:
            return self._default_name
        return posixpath.basename(target.relative) + ARCHIVE_EXTENSION

    def ensure_folder(self, target: ResolvedPath) -> None:
        """Raise :class:`NotFound` unless ``target`` is an existing directory."""
        if not target.absolute.is_dir():
            logger.info("Folder download for missing folder %r", target.relative)
            raise NotFound("Folder not found")

    def iter_members(self, target: ResolvedPath) -> Iterator[tuple[Path, str]]:
        """Yield ``(absolute path, archive name)`` pairs in archive order.

        Directory members have a trailing ``/`` in their archive name.
        Raises ``OSError`` if any directory cannot be listed.
        """
        st = target.absolute.stat()
        yield from self._members(
            target.absolute, "", frozenset({(st.st_dev, st.st_ino)})
        )

    def _members(
        self,
        directory: Path,
        prefix: str,
        ancestors: frozenset[tuple[int, int]],
    ) -> Iterator[tuple[Path, str]]:
        entries = list_entries(directory, self._resolver, self._follow_symlinks)
        if not entries and prefix:
            yield directory, prefix + "/"
            return
        for entry in entries:
            name = join_relative(prefix, entry.name)
            if not entry.is_dir:
                yield entry.path, name
            elif entry.inode_key not in ancestors:
                yield from self._members(entry.path, name, ancestors | {entry.inode_key})
            else:
                logger.warning("Not archiving %s: symlink loop", entry.path)

    def write_archive(self, target: ResolvedPath, fileobj: BinaryIO) -> int:
        """Write the whole archive to ``fileobj``; returns the member count.

        ``fileobj`` only needs ``write`` and ``flush``; seeking is not
        required, so sockets and queues work as well as regular files.
        """
        count = 0
        try:
            with zipfile.ZipFile(
                fileobj,
                mode="w",
                compression=zipfile.ZIP_DEFLATED,
                compresslevel=self._compress_level,
                strict_timestamps=False,
            ) as zf:
                for path, arcname in self.iter_members(target):
                    zf.write(path, arcname)
                    count += 1
        except OSError as exc:
            logger.error("Archiving %r failed: %s", target.relative, exc)
            raise ArchiveFailure(f"Archive creation failed: {exc.strerror or exc}") from exc
        return count

    def build_to_tempfile(self, target: ResolvedPath) -> Path:
        """Spool the complete archive to a temporary file and return its path.

        The caller owns the file and must delete it.
        """
        fd, name = tempfile.mkstemp(prefix="explorer-", suffix=ARCHIVE_EXTENSION)
        try:
            with os.fdopen(fd, "wb") as fh:
                count = self.write_archive(target, fh)
        except BaseException:
            os.unlink(name)
            raise
        logger.info("Spooled %d members of %r to %s", count, target.relative, name)
        return Path(name)

    async def stream(self, target: ResolvedPath) -> AsyncIterator[bytes]:
        """Yield archive bytes as they are produced.

        Compression runs on a worker thread. If the consumer stops early
        (client disconnect), the worker is cancelled at its next write. A
        read error raises :class:`ArchiveFailure` from this iterator, after
        earlier chunks may already have been sent.
        """
        sink = _ChunkQueue(self._chunk_size)
        worker = threading.Thread(
            target=self._produce,
            args=(target, sink),
            name=f"archive:{target.relative or '/'}",
            daemon=True,
        )
        worker.start()
        try:
            while True:
                item = await asyncio.to_thread(sink.get)
                if isinstance(item, _EndOfArchive):
                    if item.error is not None:
                        raise ArchiveFailure(str(item.error)) from item.error
                    return
                yield item
        finally:
            sink.cancel()

    def _produce(self, target: ResolvedPath, sink: _ChunkQueue) -> None:
        try:
            count = self.write_archive(target, sink)
        except ArchiveFailure as exc:
            if sink.cancelled:
                logger.debug("Archive of %r abandoned by client", target.relative)
                sink.finish()
            else:
                sink.finish(exc)
        except ArchiveCancelled:
            logger.info("Archive of %r cancelled by client", target.relative)
            sink.finish()
        except Exception as exc:
            logger.exception("Unexpected error archiving %r", target.relative)
            sink.finish(exc)
        else:
            logger.info("Streamed %d members of %r", count, target.relative)
            sink.finish()

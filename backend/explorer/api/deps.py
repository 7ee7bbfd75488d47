"""FastAPI dependency injection - resolver and filesystem services."""

from __future__ import annotations

from fastapi import Depends

from explorer.config import settings
from explorer.services import ArchiveStreamer, PathResolver, SearchEngine, TreeBuilder


def get_resolver() -> PathResolver:
    """Resolver bound to the configured root directory."""
    return PathResolver(settings.root_dir)


def get_tree_builder(resolver: PathResolver = Depends(get_resolver)) -> TreeBuilder:
    return TreeBuilder(resolver, follow_symlinks=settings.follow_symlinks)


def get_search_engine(resolver: PathResolver = Depends(get_resolver)) -> SearchEngine:
    return SearchEngine(
        resolver,
        max_depth=settings.search_max_depth,
        max_results=settings.search_max_results,
        follow_symlinks=settings.follow_symlinks,
    )


def get_archive_streamer(resolver: PathResolver = Depends(get_resolver)) -> ArchiveStreamer:
    return ArchiveStreamer(
        resolver,
        default_name=settings.archive_default_name,
        compress_level=settings.archive_compress_level,
        chunk_size=settings.archive_chunk_size,
        follow_symlinks=settings.follow_symlinks,
    )

"""Filesystem services - path confinement, tree snapshots, search, archives."""

from explorer.services.archive_service import ArchiveStreamer
from explorer.services.path_resolver import PathResolver, ResolvedPath
from explorer.services.search_service import SearchEngine
from explorer.services.tree_builder import TreeBuilder

__all__ = [
    "ArchiveStreamer",
    "PathResolver",
    "ResolvedPath",
    "SearchEngine",
    "TreeBuilder",
]

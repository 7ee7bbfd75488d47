"""Directory tree listing."""

import asyncio

from fastapi import APIRouter, Depends

from explorer.api.deps import get_resolver, get_tree_builder
from explorer.schemas.files import TreeResponse
from explorer.services import PathResolver, TreeBuilder

router = APIRouter()


@router.get("/tree", response_model=TreeResponse, response_model_exclude_none=True)
async def get_tree(
    path: str = "",
    resolver: PathResolver = Depends(get_resolver),
    builder: TreeBuilder = Depends(get_tree_builder),
):
    """Fully expanded tree of ``path`` (relative to the root; empty = root)."""
    target = resolver.resolve(path)
    return await asyncio.to_thread(builder.snapshot, target)

"""Name search."""

import asyncio

from fastapi import APIRouter, Depends

from explorer.api.deps import get_resolver, get_search_engine
from explorer.schemas.files import SearchResponse
from explorer.services import PathResolver, SearchEngine

router = APIRouter()


@router.get("/search", response_model=SearchResponse, response_model_exclude_none=True)
async def search(
    q: str = "",
    path: str = "",
    resolver: PathResolver = Depends(get_resolver),
    engine: SearchEngine = Depends(get_search_engine),
):
    """Files and folders under ``path`` whose name contains ``q``."""
    if not q.strip():
        return SearchResponse(results=[])
    target = resolver.resolve(path)
    results = await asyncio.to_thread(engine.search, target, q)
    return SearchResponse(results=results)

"""API route registration."""

from fastapi import APIRouter

from explorer.api.routes import download, health, info, search, tree

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(info.router, tags=["info"])
api_router.include_router(tree.router, tags=["files"])
api_router.include_router(search.router, tags=["files"])
api_router.include_router(download.router, tags=["download"])

"""Explorer FastAPI application factory."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles

from explorer import __version__
from explorer.config import settings
from explorer.exceptions import ExplorerError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    """Startup / shutdown lifecycle."""
    _setup_logging()

    root = Path(settings.root_dir)
    if not root.is_dir():
        raise RuntimeError(f"Configured root is not a directory: {root}")
    logger.info(
        "Explorer v%s serving %s on %s:%s", __version__, root, settings.host, settings.port
    )
    try:
        yield
    finally:
        logger.info("Explorer shutting down")


def _setup_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for noisy in ("watchfiles", "multipart"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


async def _handle_explorer_error(request: Request, exc: ExplorerError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.debug("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


def create_app() -> FastAPI:
    """Application factory."""
    from explorer.api.routes import api_router

    app = FastAPI(
        title=settings.app_name,
        version=__version__,
        debug=settings.debug,
        lifespan=_lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ExplorerError, _handle_explorer_error)

    app.include_router(api_router, prefix=settings.api_prefix)

    # Browser client, if one is deployed next to the backend
    static_dir = Path(settings.static_dir).resolve()
    if static_dir.is_dir() and (static_dir / "index.html").exists():
        if (static_dir / "assets").is_dir():
            app.mount("/assets", StaticFiles(directory=static_dir / "assets"), name="frontend-assets")

        _index = static_dir / "index.html"
        _api_root = settings.api_prefix.strip("/")

        # SPA fallback: any non-API route serves index.html
        @app.get("/", include_in_schema=False)
        async def _spa_root():
            return FileResponse(_index)

        @app.get("/{full_path:path}", include_in_schema=False)
        async def _spa_fallback(full_path: str):
            if _api_root and (full_path == _api_root or full_path.startswith(_api_root + "/")):
                raise HTTPException(status_code=404, detail="Not Found")
            # Serve the exact file first (favicon.ico, etc.)
            file_path = (static_dir / full_path).resolve()
            if full_path and static_dir in file_path.parents and file_path.is_file():
                return FileResponse(file_path)
            return FileResponse(_index)

        logger.info("Frontend mounted from %s", static_dir)
    else:
        logger.info("No frontend found at %s, API-only mode", static_dir)

    return app


app = create_app()


def run(**kwargs: Any) -> None:
    import uvicorn

    uvicorn.run(
        "explorer.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        workers=settings.uvicorn_workers,
        log_level=settings.log_level.lower(),
        **kwargs,
    )


if __name__ == "__main__":
    run()

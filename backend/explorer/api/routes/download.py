"""File and folder downloads."""

import asyncio
import logging
import mimetypes
import posixpath
import urllib.parse

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import FileResponse, StreamingResponse
from starlette.background import BackgroundTask

from explorer.api.deps import get_archive_streamer, get_resolver
from explorer.config import settings
from explorer.exceptions import NotFound
from explorer.services import ArchiveStreamer, PathResolver

logger = logging.getLogger(__name__)

router = APIRouter()


def _content_disposition(filename: str) -> str:
    try:
        filename.encode("ascii")
        escaped = filename.replace("\\", "\\\\").replace('"', '\\"')
        return f'attachment; filename="{escaped}"'
    except UnicodeEncodeError:
        encoded = urllib.parse.quote(filename, safe="")
        return f"attachment; filename*=UTF-8''{encoded}"


@router.get("/download")
async def download_file(
    path: str | None = None,
    resolver: PathResolver = Depends(get_resolver),
):
    """Send a single file as an attachment."""
    if not path:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing path")
    target = resolver.resolve(path)
    if target.is_root or not await asyncio.to_thread(target.absolute.is_file):
        logger.info("Download of missing file %r", target.relative)
        raise NotFound("File not found")

    filename = posixpath.basename(target.relative)
    media_type, _ = mimetypes.guess_type(filename)
    return FileResponse(
        target.absolute,
        filename=filename,
        media_type=media_type or "application/octet-stream",
    )


@router.get("/download-folder")
async def download_folder(
    path: str = "",
    resolver: PathResolver = Depends(get_resolver),
    streamer: ArchiveStreamer = Depends(get_archive_streamer),
):
    """Send a folder's recursive contents as a zip archive."""
    target = resolver.resolve(path)
    await asyncio.to_thread(streamer.ensure_folder, target)
    filename = streamer.archive_name(target)

    if settings.archive_buffered:
        archive = await asyncio.to_thread(streamer.build_to_tempfile, target)
        return FileResponse(
            archive,
            filename=filename,
            media_type="application/zip",
            background=BackgroundTask(archive.unlink, missing_ok=True),
        )

    logger.info("Streaming archive %s of %r", filename, target.relative)
    return StreamingResponse(
        streamer.stream(target),
        media_type="application/zip",
        headers={"Content-Disposition": _content_disposition(filename)},
    )

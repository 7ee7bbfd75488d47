"""Server and root directory info."""

import asyncio
import logging
import platform
import socket
from datetime import datetime, timezone

import psutil
from fastapi import APIRouter, Depends

from explorer.api.deps import get_resolver
from explorer.exceptions import DirectoryUnavailable
from explorer.schemas.system import InfoResponse, PlatformInfo
from explorer.services import PathResolver

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/info", response_model=InfoResponse)
async def server_info(resolver: PathResolver = Depends(get_resolver)):
    """Root path, server clock, host platform and free space on the root volume."""
    try:
        st = await asyncio.to_thread(resolver.root.stat)
    except OSError as exc:
        logger.warning("Cannot stat root %s: %s", resolver.root, exc)
        raise DirectoryUnavailable("Unable to read root directory") from exc

    disk_total = disk_free = None
    try:
        usage = await asyncio.to_thread(psutil.disk_usage, str(resolver.root))
        disk_total, disk_free = usage.total, usage.free
    except OSError as exc:
        logger.debug("disk_usage unavailable for %s: %s", resolver.root, exc)

    return InfoResponse(
        root_path=str(resolver.root),
        server_time=datetime.now(timezone.utc),
        root_modified=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
        platform=PlatformInfo(
            system=platform.system(),
            release=platform.release(),
            machine=platform.machine(),
            python=platform.python_version(),
            hostname=socket.gethostname(),
        ),
        disk_total_bytes=disk_total,
        disk_free_bytes=disk_free,
    )

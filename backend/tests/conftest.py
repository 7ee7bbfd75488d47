"""Test fixtures - a small directory tree on disk and a FastAPI test client."""

import os
from pathlib import Path

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from explorer.api.deps import get_resolver
from explorer.main import create_app
from explorer.services import PathResolver


def _write(path: Path, content: str = "") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    return path


@pytest.fixture
def root_dir(tmp_path) -> Path:
    """Root containing ``Docs/report.pdf`` and ``readme.txt``."""
    root = tmp_path / "root"
    root.mkdir()
    _write(root / "Docs" / "report.pdf", "%PDF-1.4 quarterly report")
    _write(root / "readme.txt", "hello explorer\n")
    return root


@pytest.fixture
def write_file():
    return _write


@pytest.fixture
def resolver(root_dir) -> PathResolver:
    return PathResolver(root_dir)


@pytest.fixture
def outside_dir(tmp_path) -> Path:
    """A directory next to the root that must never be reachable."""
    outside = tmp_path / "outside"
    outside.mkdir()
    _write(outside / "secret.txt", "do not serve")
    return outside


@pytest.fixture
def symlinks_supported(tmp_path) -> bool:
    probe = tmp_path / "probe-link"
    try:
        os.symlink(tmp_path, probe)
    except (OSError, NotImplementedError):
        return False
    probe.unlink()
    return True


@pytest_asyncio.fixture
async def client(resolver: PathResolver):
    """Async test client whose resolver points at the temporary root."""
    app = create_app()
    app.dependency_overrides[get_resolver] = lambda: resolver

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c

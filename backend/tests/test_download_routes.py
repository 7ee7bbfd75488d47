"""Tests for /api/download and /api/download-folder."""

import io
import zipfile
from unittest.mock import patch

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_download_file(client: AsyncClient):
    resp = await client.get("/api/download", params={"path": "readme.txt"})
    assert resp.status_code == 200
    assert resp.content == b"hello explorer\n"
    disposition = resp.headers["content-disposition"]
    assert disposition.startswith("attachment")
    assert "readme.txt" in disposition
    assert resp.headers["content-type"].startswith("text/plain")


@pytest.mark.asyncio
async def test_download_nested_file(client: AsyncClient):
    resp = await client.get("/api/download", params={"path": "Docs/report.pdf"})
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"


@pytest.mark.asyncio
async def test_download_non_ascii_name(client: AsyncClient, root_dir, write_file):
    write_file(root_dir / "résumé.txt", "cv")
    resp = await client.get("/api/download", params={"path": "résumé.txt"})
    assert resp.status_code == 200
    assert "filename*=utf-8''r%c3%a9sum%c3%a9.txt" in resp.headers["content-disposition"].lower()


@pytest.mark.asyncio
async def test_download_missing_path_param(client: AsyncClient):
    resp = await client.get("/api/download")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Missing path"


@pytest.mark.asyncio
async def test_download_invalid_path(client: AsyncClient):
    resp = await client.get("/api/download", params={"path": "../outside/secret.txt"})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_download_not_found(client: AsyncClient):
    resp = await client.get("/api/download", params={"path": "missing.txt"})
    assert resp.status_code == 404
    assert resp.json()["detail"] == "File not found"


@pytest.mark.asyncio
async def test_download_directory_is_not_found(client: AsyncClient):
    resp = await client.get("/api/download", params={"path": "Docs"})
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_download_root_is_not_found(client: AsyncClient):
    resp = await client.get("/api/download", params={"path": "."})
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_download_folder(client: AsyncClient, root_dir, write_file):
    write_file(root_dir / "project" / "a.txt", "alpha")
    write_file(root_dir / "project" / "sub" / "b.txt", "bravo")

    resp = await client.get("/api/download-folder", params={"path": "project"})
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/zip"
    assert resp.headers["content-disposition"] == 'attachment; filename="project.zip"'

    zf = zipfile.ZipFile(io.BytesIO(resp.content))
    assert sorted(zf.namelist()) == ["a.txt", "sub/b.txt"]
    assert zf.read("a.txt") == b"alpha"


@pytest.mark.asyncio
async def test_download_folder_root_default_name(client: AsyncClient):
    resp = await client.get("/api/download-folder")

    assert resp.status_code == 200
    assert 'filename="files.zip"' in resp.headers["content-disposition"]
    zf = zipfile.ZipFile(io.BytesIO(resp.content))
    assert sorted(zf.namelist()) == ["Docs/report.pdf", "readme.txt"]


@pytest.mark.asyncio
async def test_download_folder_whitespace_name(client: AsyncClient, root_dir, write_file):
    write_file(root_dir / "   " / "inner.txt", "spaced")
    resp = await client.get("/api/download-folder", params={"path": "   "})

    assert resp.status_code == 200
    assert 'filename="   .zip"' in resp.headers["content-disposition"]
    assert zipfile.ZipFile(io.BytesIO(resp.content)).namelist() == ["inner.txt"]


@pytest.mark.asyncio
async def test_download_folder_not_found(client: AsyncClient):
    resp = await client.get("/api/download-folder", params={"path": "missing"})
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Folder not found"


@pytest.mark.asyncio
async def test_download_folder_on_file(client: AsyncClient):
    resp = await client.get("/api/download-folder", params={"path": "readme.txt"})
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_download_folder_invalid_path(client: AsyncClient):
    resp = await client.get("/api/download-folder", params={"path": "../"})
    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_download_folder_buffered(client: AsyncClient):
    with patch("explorer.api.routes.download.settings") as mock_settings:
        mock_settings.archive_buffered = True
        resp = await client.get("/api/download-folder", params={"path": "Docs"})

    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/zip"
    assert 'filename="Docs.zip"' in resp.headers["content-disposition"]
    assert zipfile.ZipFile(io.BytesIO(resp.content)).namelist() == ["report.pdf"]


@pytest.mark.asyncio
async def test_download_folder_buffered_failure_is_clean_error(client: AsyncClient):
    with (
        patch("explorer.api.routes.download.settings") as mock_settings,
        patch(
            "explorer.services.archive_service.list_entries",
            side_effect=PermissionError(13, "Permission denied"),
        ),
    ):
        mock_settings.archive_buffered = True
        resp = await client.get("/api/download-folder", params={"path": "Docs"})

    assert resp.status_code == 500
    assert "Archive creation failed" in resp.json()["detail"]

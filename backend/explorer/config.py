"""Explorer configuration - Pydantic BaseSettings loaded from .env."""

from __future__ import annotations

import re
from functools import lru_cache
from pathlib import Path

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_URL_SCHEME = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")


class Settings(BaseSettings):
    """Application settings. The root directory is fixed for the process lifetime."""

    app_name: str = "TreeView Explorer"
    debug: bool = False
    log_level: str = "INFO"

    # Network
    host: str = "127.0.0.1"
    port: int = 3000
    api_prefix: str = "/api"
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # Exposed tree
    root_dir: str = "."
    static_dir: str = "./public"
    follow_symlinks: bool = True

    # Folder downloads
    archive_default_name: str = "files.zip"
    archive_compress_level: int = 9
    archive_chunk_size: int = 64 * 1024
    archive_buffered: bool = False  # spool to a temp file before sending

    # Name search bounds
    search_max_depth: int = 10
    search_max_results: int = 100

    uvicorn_workers: int = 1

    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        env_prefix="EXPLORER_",
        extra="ignore",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def assemble_cors_origins(cls, value: list[str] | str) -> list[str]:
        if isinstance(value, str) and not value.startswith("["):
            return [o.strip() for o in value.split(",") if o.strip()]
        if isinstance(value, list):
            return value
        return ["http://localhost:3000"]

    @field_validator("root_dir")
    @classmethod
    def reject_remote_roots(cls, value: str) -> str:
        if _URL_SCHEME.match(value):
            raise ValueError(
                f"remote storage roots are not supported: {value!r} "
                "(root_dir must be a local directory)"
            )
        return value

    @field_validator("archive_compress_level")
    @classmethod
    def check_compress_level(cls, value: int) -> int:
        if not 0 <= value <= 9:
            raise ValueError("archive_compress_level must be between 0 and 9")
        return value

    @model_validator(mode="after")
    def _resolve_paths(self) -> "Settings":
        """Make root and static directories absolute."""
        base = Path(__file__).resolve().parent.parent  # backend/
        self.root_dir = str(Path(self.root_dir).expanduser().resolve())
        if not Path(self.static_dir).is_absolute():
            self.static_dir = str(base.parent / self.static_dir)
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()

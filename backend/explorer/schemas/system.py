"""Server info and health schemas."""

from datetime import datetime

from pydantic import BaseModel, Field


class PlatformInfo(BaseModel):
    system: str
    release: str
    machine: str
    python: str
    hostname: str


class InfoResponse(BaseModel):
    """Static facts about the serving host and the exposed root."""
    root_path: str = Field(alias="rootPath")
    server_time: datetime = Field(alias="serverTime")
    root_modified: datetime = Field(alias="rootModified")
    platform: PlatformInfo
    disk_total_bytes: int | None = Field(default=None, alias="diskTotalBytes")
    disk_free_bytes: int | None = Field(default=None, alias="diskFreeBytes")

    model_config = {"populate_by_name": True}


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    service: str = "explorer"

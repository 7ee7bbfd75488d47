"""File tree schemas - the JSON contract consumed by the browser client."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field


class Node(BaseModel):
    """One filesystem entry in a tree or search response."""
    name: str
    type: Literal["folder", "file"]
    path: str  # POSIX-style, relative to the configured root
    size: int  # bytes for files, direct child count for folders
    modified: datetime
    extension: Optional[str] = None  # files only, lowercase with leading dot
    children: Optional[list[Node]] = None  # folders only
    error: Optional[str] = None  # set when a nested folder could not be read


class FolderInfo(BaseModel):
    """Metadata of the folder a tree request was made for."""
    name: str
    path: str
    modified: datetime
    item_count: int = Field(alias="itemCount")

    model_config = {"populate_by_name": True}


class TreeResponse(BaseModel):
    tree: list[Node]
    current_folder: FolderInfo = Field(alias="currentFolder")

    model_config = {"populate_by_name": True}


class SearchResponse(BaseModel):
    results: list[Node] = []

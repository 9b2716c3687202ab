"""Browser state schemas — snapshot and request bodies for the presentation layer."""

from __future__ import annotations

from pydantic import BaseModel

from filedeck.schemas.files import ClipboardPayload, FileEntry
from filedeck.schemas.transfers import TransferTask


class FilterOut(BaseModel):
    search_query: str = ""
    show_hidden: bool = True


class BrowserSnapshot(BaseModel):
    """Full, consistent view of the browser at one version."""
    version: int
    device_id: str | None
    path: str
    history: list[str]
    history_index: int
    can_go_back: bool
    can_go_forward: bool
    is_loading: bool
    error: str | None = None
    files: list[FileEntry]
    visible_files: list[FileEntry]
    selected: list[str]
    filter: FilterOut
    clipboard: ClipboardPayload | None = None
    cut_names: list[str] = []
    tasks: list[TransferTask] = []


class NavigateRequest(BaseModel):
    path: str


class DeviceRequest(BaseModel):
    device_id: str | None = None


class NameRequest(BaseModel):
    name: str


class RangeRequest(BaseModel):
    from_name: str
    to_name: str


class FilterUpdate(BaseModel):
    search_query: str | None = None
    show_hidden: bool | None = None


class RenameRequest(BaseModel):
    name: str
    new_name: str


class DeleteRequest(BaseModel):
    names: list[str] | None = None  # None = current selection

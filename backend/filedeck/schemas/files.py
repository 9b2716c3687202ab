"""File schemas — remote directory entries and clipboard payloads."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, computed_field

from filedeck.utils.formatting import format_size, permission_label

PARENT_SENTINEL = ".."


class FileEntry(BaseModel):
    """One entry of a remote directory listing (wire shape of the device bridge)."""

    model_config = ConfigDict(frozen=True)

    name: str
    path: str
    is_dir: bool = False
    size: int | None = Field(default=None, ge=0)  # bytes
    permissions: str = ""  # unix-style, e.g. "drwxrwxrwx"

    @property
    def is_hidden(self) -> bool:
        return self.name.startswith(".") and self.name != PARENT_SENTINEL

    @property
    def is_parent_sentinel(self) -> bool:
        return self.name == PARENT_SENTINEL

    @computed_field
    @property
    def size_label(self) -> str:
        return format_size(self.size) if not self.is_dir else "-"

    @computed_field
    @property
    def access_label(self) -> str:
        return permission_label(self.permissions)


def sort_listing(entries: list[FileEntry]) -> list[FileEntry]:
    """Directories first, then case-sensitive lexical name order."""
    return sorted(entries, key=lambda e: (not e.is_dir, e.name))


class ClipboardOperation(str, Enum):
    COPY = "copy"
    CUT = "cut"


class ClipboardPayload(BaseModel):
    """Snapshot of selected entries held for a later paste."""

    model_config = ConfigDict(frozen=True)

    operation: ClipboardOperation
    source_path: str
    entries: tuple[FileEntry, ...] = ()

    @property
    def names(self) -> frozenset[str]:
        return frozenset(e.name for e in self.entries)


class PasteResult(BaseModel):
    succeeded: int = 0
    failed: int = 0
    errors: dict[str, str] = {}  # entry name -> error message


class BatchResult(BaseModel):
    """Outcome of a per-entry remote batch (delete)."""
    succeeded: list[str] = []
    errors: dict[str, str] = {}

    @property
    def failed(self) -> int:
        return len(self.errors)


class FilePreview(BaseModel):
    name: str
    path: str
    size: int
    content_base64: str

"""Transfer task schemas — background upload/download lifecycle."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TransferKind(str, Enum):
    UPLOAD = "upload"
    DOWNLOAD = "download"


class TaskStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"


TERMINAL_STATUSES = frozenset({TaskStatus.COMPLETED, TaskStatus.ERROR})
ACTIVE_STATUSES = frozenset({TaskStatus.PENDING, TaskStatus.RUNNING})


class TransferDescriptor(BaseModel):
    """What the initiating action supplies when submitting a transfer."""
    kind: TransferKind
    name: str
    id: str | None = None
    progress: int = Field(default=0, ge=0, le=100)


class TransferTask(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    kind: TransferKind
    name: str
    progress: int = Field(default=0, ge=0, le=100)
    status: TaskStatus = TaskStatus.RUNNING
    error: str | None = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES


class UploadRequest(BaseModel):
    local_paths: list[str]


class DownloadRequest(BaseModel):
    name: str
    destination: str


class SubmittedTasks(BaseModel):
    task_ids: list[str]

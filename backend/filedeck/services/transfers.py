"""Background upload/download tasks."""

from __future__ import annotations

import asyncio
import functools
import logging
import uuid
from typing import Any, Awaitable, Callable

from filedeck.schemas.transfers import (
    ACTIVE_STATUSES,
    TaskStatus,
    TransferDescriptor,
    TransferKind,
    TransferTask,
)
from filedeck.services.clipboard import join_path
from filedeck.services.device_commands import DeviceCommands, OperationFailed
from filedeck.services.events import ChangeNotifier, Topic

logger = logging.getLogger(__name__)


def local_basename(local_path: str) -> str:
    """Last segment of a local path, accepting either separator."""
    name = local_path.replace("\\", "/").rstrip("/").rsplit("/", 1)[-1]
    return name or "unknown"


class TransferTaskQueue:
    """Unbounded list of transfer tasks, newest first.

    Each task has exactly one writer (the coroutine running it). The list is
    replaced as a whole on every change.
    """

    def __init__(self, notifier: ChangeNotifier | None = None):
        self._tasks: tuple[TransferTask, ...] = ()
        self._notifier = notifier

    @property
    def tasks(self) -> tuple[TransferTask, ...]:
        return self._tasks

    def get(self, task_id: str) -> TransferTask | None:
        return next((t for t in self._tasks if t.id == task_id), None)

    def active_count(self) -> int:
        return sum(1 for t in self._tasks if t.status in ACTIVE_STATUSES)

    def add_task(self, descriptor: TransferDescriptor, status: TaskStatus = TaskStatus.RUNNING) -> TransferTask:
        task = TransferTask(
            id=descriptor.id or uuid.uuid4().hex[:12],
            kind=descriptor.kind,
            name=descriptor.name,
            progress=descriptor.progress,
            status=status,
        )
        self._tasks = (task, *self._tasks)
        self._emit()
        return task

    def update_task(self, task_id: str, **changes: Any) -> TransferTask | None:
        """Merge ``changes`` into a task. Unknown ids are ignored.

        Terminal tasks keep their status; only a new task can retry.
        """
        current = self.get(task_id)
        if current is None:
            return None
        if current.is_terminal and "status" in changes and changes["status"] != current.status:
            logger.debug("Task %s is %s; ignoring status %s", task_id, current.status.value, changes["status"])
            changes = {k: v for k, v in changes.items() if k != "status"}

        updated = TransferTask.model_validate({**current.model_dump(), **changes, "id": current.id})
        self._tasks = tuple(updated if t.id == task_id else t for t in self._tasks)
        self._emit()
        return updated

    def remove_task(self, task_id: str) -> bool:
        remaining = tuple(t for t in self._tasks if t.id != task_id)
        if len(remaining) == len(self._tasks):
            return False
        self._tasks = remaining
        self._emit()
        return True

    def clear_completed(self) -> int:
        """Discard every completed or failed task. Returns how many were removed."""
        remaining = tuple(t for t in self._tasks if t.status in ACTIVE_STATUSES)
        removed = len(self._tasks) - len(remaining)
        if removed:
            self._tasks = remaining
            self._emit()
        return removed

    def _emit(self) -> None:
        if self._notifier:
            self._notifier.emit(Topic.TASKS)


class TransferService:
    """Starts transfers as independent asyncio tasks.

    With ``max_concurrent=0`` every transfer starts immediately as ``running``.
    A positive limit gates execution on a semaphore; waiting tasks show as
    ``pending`` and completion order may differ from the unbounded mode.
    """

    def __init__(
        self,
        queue: TransferTaskQueue,
        commands: DeviceCommands,
        max_concurrent: int = 0,
    ):
        self._queue = queue
        self._commands = commands
        self._semaphore = asyncio.Semaphore(max_concurrent) if max_concurrent > 0 else None
        self._running: set[asyncio.Task] = set()

    @property
    def queue(self) -> TransferTaskQueue:
        return self._queue

    def submit(
        self,
        descriptor: TransferDescriptor,
        operation: Callable[[], Awaitable[None]],
        on_success: Callable[[], Awaitable[None] | None] | None = None,
    ) -> TransferTask:
        """Register a task and schedule ``operation``. Must run inside the event loop."""
        status = TaskStatus.PENDING if self._semaphore else TaskStatus.RUNNING
        task = self._queue.add_task(descriptor, status=status)
        runner = asyncio.create_task(self._run(task, operation, on_success))
        self._running.add(runner)
        runner.add_done_callback(self._running.discard)
        return task

    def upload_files(
        self,
        device_id: str,
        local_paths: list[str],
        directory: str,
        on_success: Callable[[str], Awaitable[None] | None] | None = None,
    ) -> list[TransferTask]:
        """One upload task per local file, targeting ``directory`` as it is now."""
        submitted = []
        for local_path in local_paths:
            name = local_basename(local_path)
            remote_path = join_path(directory, name)

            async def _upload(local_path: str = local_path, remote_path: str = remote_path) -> None:
                await self._commands.upload_file(device_id, local_path, remote_path)

            callback = functools.partial(on_success, directory) if on_success else None
            submitted.append(self.submit(
                TransferDescriptor(kind=TransferKind.UPLOAD, name=name),
                _upload,
                callback,
            ))
        return submitted

    def download(self, device_id: str, remote_path: str, name: str, destination: str) -> TransferTask:
        async def _download() -> None:
            await self._commands.download_file(device_id, remote_path, destination)

        return self.submit(TransferDescriptor(kind=TransferKind.DOWNLOAD, name=name), _download)

    async def wait_idle(self) -> None:
        """Wait for every in-flight transfer to settle."""
        while self._running:
            await asyncio.gather(*list(self._running), return_exceptions=True)

    async def _run(
        self,
        task: TransferTask,
        operation: Callable[[], Awaitable[None]],
        on_success: Callable[[], Awaitable[None] | None] | None,
    ) -> None:
        if self._semaphore is None:
            await self._execute(task, operation, on_success)
            return
        async with self._semaphore:
            self._queue.update_task(task.id, status=TaskStatus.RUNNING)
            await self._execute(task, operation, on_success)

    async def _execute(
        self,
        task: TransferTask,
        operation: Callable[[], Awaitable[None]],
        on_success: Callable[[], Awaitable[None] | None] | None,
    ) -> None:
        try:
            await operation()
        except OperationFailed as e:
            logger.warning("%s of %s failed: %s", task.kind.value.capitalize(), task.name, e)
            self._queue.update_task(task.id, status=TaskStatus.ERROR, error=str(e))
            return
        except Exception as e:
            logger.exception("%s of %s crashed", task.kind.value.capitalize(), task.name)
            self._queue.update_task(task.id, status=TaskStatus.ERROR, error=str(e) or type(e).__name__)
            return

        self._queue.update_task(task.id, status=TaskStatus.COMPLETED, progress=100)
        logger.info("%s of %s completed", task.kind.value.capitalize(), task.name)
        if on_success is not None:
            try:
                result = on_success()
                if asyncio.iscoroutine(result):
                    await result
            except Exception:
                logger.exception("Post-transfer hook failed for %s", task.name)

"""Tests for transfer tasks — lifecycle, isolation, clearing."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from filedeck.schemas.transfers import TaskStatus, TransferDescriptor, TransferKind
from filedeck.services.device_commands import OperationFailed
from filedeck.services.transfers import TransferService, TransferTaskQueue, local_basename

DEVICE_ID = "emulator-5554"


@pytest.fixture
def queue():
    return TransferTaskQueue()


def _upload(name="photo.jpg", task_id=None):
    return TransferDescriptor(kind=TransferKind.UPLOAD, name=name, id=task_id)


async def _wait_for_status(queue, task_id, status, attempts=400):
    for _ in range(attempts):
        if queue.get(task_id).status == status:
            return
        await asyncio.sleep(0.005)
    raise AssertionError(f"task {task_id} never reached {status}")


class TestQueue:
    def test_add_task_starts_running(self, queue):
        task = queue.add_task(_upload())
        assert task.status == TaskStatus.RUNNING
        assert task.progress == 0
        assert task.id
        assert queue.get(task.id) == task

    def test_newest_first(self, queue):
        first = queue.add_task(_upload("one"))
        second = queue.add_task(_upload("two"))
        assert [t.id for t in queue.tasks] == [second.id, first.id]

    def test_explicit_id_kept(self, queue):
        task = queue.add_task(_upload(task_id="abc"))
        assert task.id == "abc"

    def test_update_merges_fields(self, queue):
        task = queue.add_task(_upload())
        updated = queue.update_task(task.id, status=TaskStatus.COMPLETED, progress=100)
        assert updated.status == TaskStatus.COMPLETED
        assert updated.progress == 100
        assert updated.name == task.name
        assert updated.created_at == task.created_at

    def test_update_unknown_id_is_noop(self, queue):
        queue.add_task(_upload())
        before = queue.tasks
        assert queue.update_task("missing", status=TaskStatus.ERROR) is None
        assert queue.tasks == before

    def test_terminal_status_is_final(self, queue):
        task = queue.add_task(_upload())
        queue.update_task(task.id, status=TaskStatus.ERROR, error="device offline")
        queue.update_task(task.id, status=TaskStatus.RUNNING)
        assert queue.get(task.id).status == TaskStatus.ERROR
        assert queue.get(task.id).error == "device offline"

    def test_clear_completed_keeps_active(self, queue):
        running = queue.add_task(_upload("running"))
        pending = queue.add_task(_upload("pending"), status=TaskStatus.PENDING)
        done = queue.add_task(_upload("done"))
        failed = queue.add_task(_upload("failed"))
        queue.update_task(done.id, status=TaskStatus.COMPLETED, progress=100)
        queue.update_task(failed.id, status=TaskStatus.ERROR, error="x")

        assert queue.clear_completed() == 2
        assert {t.id for t in queue.tasks} == {running.id, pending.id}
        assert queue.active_count() == 2

    def test_remove_task(self, queue):
        task = queue.add_task(_upload())
        assert queue.remove_task(task.id) is True
        assert queue.remove_task(task.id) is False
        assert queue.tasks == ()


class TestService:
    @pytest.mark.asyncio
    async def test_uploads_start_immediately_and_complete(self, queue, device, tmp_path):
        local = tmp_path / "song.mp3"
        local.write_bytes(b"ID3")
        service = TransferService(queue, device)

        tasks = service.upload_files(DEVICE_ID, [str(local)], "/sdcard/Music/")
        assert tasks[0].status == TaskStatus.RUNNING
        assert tasks[0].name == "song.mp3"

        await service.wait_idle()
        task = queue.get(tasks[0].id)
        assert task.status == TaskStatus.COMPLETED
        assert task.progress == 100
        assert await device.read_file_bytes(DEVICE_ID, "/sdcard/Music/song.mp3") == b"ID3"

    @pytest.mark.asyncio
    async def test_failure_is_isolated(self, queue, device, tmp_path):
        good = tmp_path / "good.txt"
        good.write_bytes(b"ok")
        service = TransferService(queue, device)

        tasks = service.upload_files(DEVICE_ID, [str(tmp_path / "missing.txt"), str(good)], "/sdcard/")
        await service.wait_idle()

        missing, ok = (queue.get(t.id) for t in tasks)
        assert missing.status == TaskStatus.ERROR
        assert "missing.txt" in missing.error
        assert ok.status == TaskStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_completion_order_follows_settlement(self, queue, device, tmp_path):
        first, second = tmp_path / "first.bin", tmp_path / "second.bin"
        first.write_bytes(b"1")
        second.write_bytes(b"2")
        gate = device.hold_upload("/sdcard/first.bin")
        service = TransferService(queue, device)

        t1, t2 = service.upload_files(DEVICE_ID, [str(first), str(second)], "/sdcard/")
        await _wait_for_status(queue, t2.id, TaskStatus.COMPLETED)
        assert queue.get(t1.id).status == TaskStatus.RUNNING

        gate.set()
        await service.wait_idle()
        assert queue.get(t1.id).status == TaskStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_download_writes_destination(self, queue, device, tmp_path):
        service = TransferService(queue, device)
        dest = tmp_path / "notes.txt"

        task = service.download(DEVICE_ID, "/sdcard/notes.txt", "notes.txt", str(dest))
        assert task.kind == TransferKind.DOWNLOAD
        await service.wait_idle()

        assert queue.get(task.id).status == TaskStatus.COMPLETED
        assert dest.read_bytes() == b"todo"

    @pytest.mark.asyncio
    async def test_on_success_receives_target_directory(self, queue, tmp_path):
        commands = AsyncMock()
        hook = AsyncMock()
        service = TransferService(queue, commands)

        service.upload_files(DEVICE_ID, ["C:\\Users\\me\\pic.png"], "/sdcard/DCIM/", on_success=hook)
        await service.wait_idle()

        commands.upload_file.assert_awaited_once_with(DEVICE_ID, "C:\\Users\\me\\pic.png", "/sdcard/DCIM/pic.png")
        hook.assert_awaited_once_with("/sdcard/DCIM/")

    @pytest.mark.asyncio
    async def test_bounded_mode_queues_as_pending(self, queue):
        release = asyncio.Event()
        commands = AsyncMock()

        async def _slow_upload(*args):
            await release.wait()

        commands.upload_file.side_effect = _slow_upload
        service = TransferService(queue, commands, max_concurrent=1)

        t1, t2 = service.upload_files(DEVICE_ID, ["/tmp/a", "/tmp/b"], "/sdcard/")
        assert t1.status == TaskStatus.PENDING
        await asyncio.sleep(0)
        assert queue.get(t1.id).status == TaskStatus.RUNNING
        assert queue.get(t2.id).status == TaskStatus.PENDING

        release.set()
        await service.wait_idle()
        assert {t.status for t in queue.tasks} == {TaskStatus.COMPLETED}

    @pytest.mark.asyncio
    async def test_unexpected_exception_marks_error(self, queue):
        commands = AsyncMock()
        commands.download_file.side_effect = RuntimeError("disk full")
        service = TransferService(queue, commands)

        task = service.download(DEVICE_ID, "/sdcard/x", "x", "/tmp/x")
        await service.wait_idle()
        assert queue.get(task.id).status == TaskStatus.ERROR
        assert queue.get(task.id).error == "disk full"

    @pytest.mark.asyncio
    async def test_operation_failed_message_verbatim(self, queue):
        commands = AsyncMock()
        commands.download_file.side_effect = OperationFailed("adb: error: failed to stat remote object")
        service = TransferService(queue, commands)

        task = service.download(DEVICE_ID, "/sdcard/x", "x", "/tmp/x")
        await service.wait_idle()
        assert queue.get(task.id).error == "adb: error: failed to stat remote object"


@pytest.mark.parametrize(
    "path,expected",
    [("/home/me/a.txt", "a.txt"), ("C:\\data\\b.bin", "b.bin"), ("rel/dir/", "dir"), ("", "unknown")],
)
def test_local_basename(path, expected):
    assert local_basename(path) == expected

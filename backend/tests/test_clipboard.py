"""Tests for the clipboard — snapshots, cut ghosting, paste."""

from unittest.mock import AsyncMock

import pytest

from filedeck.schemas.files import ClipboardOperation, FileEntry
from filedeck.services.clipboard import ClipboardManager, join_path
from filedeck.services.device_commands import OperationFailed

DEVICE_ID = "emulator-5554"


def _entry(name):
    return FileEntry(name=name, path=f"/sdcard/{name}", size=3, permissions="-rw-rw----")


@pytest.fixture
def clipboard():
    return ClipboardManager()


class TestPayload:
    def test_copy_snapshots_full_entries(self, clipboard):
        entries = [_entry("a.txt"), _entry("b.txt")]
        payload = clipboard.copy_to_clipboard(entries, "/sdcard/")
        assert payload.operation is ClipboardOperation.COPY
        assert payload.source_path == "/sdcard/"
        assert payload.entries == tuple(entries)
        assert payload.entries[0].size == 3

    def test_new_payload_overwrites(self, clipboard):
        clipboard.copy_to_clipboard([_entry("a.txt")], "/sdcard/")
        clipboard.cut_to_clipboard([_entry("b.txt")], "/sdcard/Download/")
        assert clipboard.payload.operation is ClipboardOperation.CUT
        assert clipboard.payload.names == {"b.txt"}

    def test_clear(self, clipboard):
        clipboard.copy_to_clipboard([_entry("a.txt")], "/sdcard/")
        clipboard.clear_clipboard()
        assert clipboard.payload is None


class TestIsCutFile:
    def test_only_in_source_directory(self, clipboard):
        clipboard.cut_to_clipboard([_entry("a.txt")], "/sdcard/")
        assert clipboard.is_cut_file("a.txt", "/sdcard/") is True
        assert clipboard.is_cut_file("a.txt", "/sdcard/Download/") is False
        assert clipboard.is_cut_file("b.txt", "/sdcard/") is False

    def test_copy_never_ghosts(self, clipboard):
        clipboard.copy_to_clipboard([_entry("a.txt")], "/sdcard/")
        assert clipboard.is_cut_file("a.txt", "/sdcard/") is False

    def test_empty_clipboard(self, clipboard):
        assert clipboard.is_cut_file("a.txt", "/sdcard/") is False


class TestPaste:
    @pytest.mark.asyncio
    async def test_copy_issues_copy_per_entry(self, clipboard):
        commands = AsyncMock()
        clipboard.copy_to_clipboard([_entry("a.txt"), _entry("b.txt")], "/sdcard/")

        result = await clipboard.paste(commands, DEVICE_ID, "/sdcard/Download/")

        assert result.succeeded == 2
        assert result.failed == 0
        commands.copy_entry.assert_any_await(DEVICE_ID, "/sdcard/a.txt", "/sdcard/Download/a.txt")
        commands.copy_entry.assert_any_await(DEVICE_ID, "/sdcard/b.txt", "/sdcard/Download/b.txt")
        commands.move_entry.assert_not_called()
        assert clipboard.payload is not None  # copy payload can be pasted again

    @pytest.mark.asyncio
    async def test_cut_moves_and_consumes_payload(self, clipboard):
        commands = AsyncMock()
        clipboard.cut_to_clipboard([_entry("a.txt")], "/sdcard/")

        result = await clipboard.paste(commands, DEVICE_ID, "/sdcard/Download/")

        assert result.succeeded == 1
        commands.move_entry.assert_awaited_once_with(DEVICE_ID, "/sdcard/a.txt", "/sdcard/Download/a.txt")
        assert clipboard.payload is None

    @pytest.mark.asyncio
    async def test_failures_are_counted_and_do_not_abort(self, clipboard):
        commands = AsyncMock()
        commands.move_entry.side_effect = [OperationFailed("read-only file system"), None]
        clipboard.cut_to_clipboard([_entry("a.txt"), _entry("b.txt")], "/sdcard/")

        result = await clipboard.paste(commands, DEVICE_ID, "/data/")

        assert result.succeeded == 1
        assert result.failed == 1
        assert result.errors == {"a.txt": "read-only file system"}
        assert clipboard.payload is None

    @pytest.mark.asyncio
    async def test_empty_clipboard_is_noop(self, clipboard):
        commands = AsyncMock()
        result = await clipboard.paste(commands, DEVICE_ID, "/sdcard/")
        assert result.succeeded == 0 and result.failed == 0
        commands.copy_entry.assert_not_called()


@pytest.mark.parametrize(
    "directory,name,expected",
    [("/sdcard/", "a.txt", "/sdcard/a.txt"), ("/sdcard", "a.txt", "/sdcard/a.txt"), ("/", "x", "/x")],
)
def test_join_path(directory, name, expected):
    assert join_path(directory, name) == expected

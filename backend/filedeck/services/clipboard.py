"""Single-slot clipboard for copy/cut of remote entries."""

from __future__ import annotations

import logging
from typing import Iterable

from filedeck.schemas.files import ClipboardOperation, ClipboardPayload, FileEntry, PasteResult
from filedeck.services.device_commands import DeviceCommands, OperationFailed
from filedeck.services.events import ChangeNotifier, Topic

logger = logging.getLogger(__name__)


def join_path(directory: str, name: str) -> str:
    return directory + name if directory.endswith("/") else f"{directory}/{name}"


class ClipboardManager:
    """Holds at most one payload; survives navigation."""

    def __init__(self, notifier: ChangeNotifier | None = None):
        self._payload: ClipboardPayload | None = None
        self._notifier = notifier

    @property
    def payload(self) -> ClipboardPayload | None:
        return self._payload

    def copy_to_clipboard(self, entries: Iterable[FileEntry], source_path: str) -> ClipboardPayload:
        return self._store(ClipboardOperation.COPY, entries, source_path)

    def cut_to_clipboard(self, entries: Iterable[FileEntry], source_path: str) -> ClipboardPayload:
        return self._store(ClipboardOperation.CUT, entries, source_path)

    def clear_clipboard(self) -> None:
        if self._payload is None:
            return
        self._payload = None
        self._emit()

    def is_cut_file(self, name: str, displayed_path: str) -> bool:
        """True only in the directory the entries were cut from."""
        payload = self._payload
        return (
            payload is not None
            and payload.operation is ClipboardOperation.CUT
            and payload.source_path == displayed_path
            and name in payload.names
        )

    async def paste(self, commands: DeviceCommands, device_id: str, destination: str) -> PasteResult:
        """Copy or move every payload entry into ``destination``.

        Entries are processed one at a time; a failure is recorded and the
        rest continue. A cut payload is consumed afterwards even if some
        moves failed.
        """
        payload = self._payload
        result = PasteResult()
        if payload is None:
            return result

        for entry in payload.entries:
            source = join_path(payload.source_path, entry.name)
            dest = join_path(destination, entry.name)
            try:
                if payload.operation is ClipboardOperation.COPY:
                    await commands.copy_entry(device_id, source, dest)
                else:
                    await commands.move_entry(device_id, source, dest)
                result.succeeded += 1
            except OperationFailed as e:
                logger.warning("Failed to %s %s: %s", payload.operation.value, entry.name, e)
                result.failed += 1
                result.errors[entry.name] = str(e)

        if payload.operation is ClipboardOperation.CUT and self._payload is payload:
            self.clear_clipboard()

        logger.info(
            "Paste (%s) into %s: %d succeeded, %d failed",
            payload.operation.value, destination, result.succeeded, result.failed,
        )
        return result

    def _store(self, operation: ClipboardOperation, entries: Iterable[FileEntry], source_path: str) -> ClipboardPayload:
        self._payload = ClipboardPayload(
            operation=operation, source_path=source_path, entries=tuple(entries),
        )
        self._emit()
        return self._payload

    def _emit(self) -> None:
        if self._notifier:
            self._notifier.emit(Topic.CLIPBOARD)

"""File browser context — one owned instance wires navigation, listing, selection, clipboard and transfers."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from filedeck.schemas.browser import BrowserSnapshot, FilterOut
from filedeck.schemas.files import BatchResult, FileEntry, PasteResult
from filedeck.schemas.transfers import TransferTask
from filedeck.services.clipboard import ClipboardManager, join_path
from filedeck.services.device_commands import DeviceCommands, OperationFailed
from filedeck.services.directory_loader import DirectoryLoader
from filedeck.services.events import ChangeNotifier
from filedeck.services.file_ops import FileOperations
from filedeck.services.navigation import NavigationController
from filedeck.services.selection import FilterState, SelectionModel
from filedeck.services.transfers import TransferService, TransferTaskQueue

if TYPE_CHECKING:
    from filedeck.config import Settings

logger = logging.getLogger(__name__)


class FileBrowser:
    """Client-side state for browsing one remote device.

    Navigation methods are async: they move the history synchronously (which
    clears selection and search text) and then load the new directory.
    Selection, filter and clipboard mutations are plain synchronous calls.
    """

    def __init__(
        self,
        commands: DeviceCommands,
        device_id: str | None = None,
        initial_path: str = "/sdcard/",
        show_hidden: bool = True,
        max_concurrent_transfers: int = 0,
        preview_max_bytes: int = 1024 * 1024,
    ):
        self._commands = commands
        self._device_id = device_id or None
        self._preview_max_bytes = preview_max_bytes

        self.notifier = ChangeNotifier()
        self.filters = FilterState(show_hidden=show_hidden, notifier=self.notifier)
        self.loader = DirectoryLoader(commands, self.notifier, on_loaded=self._on_listing_replaced)
        self.selection = SelectionModel(
            listing=lambda: self.loader.files,
            displayed=self.visible_entries,
            notifier=self.notifier,
        )
        self.navigation = NavigationController(initial_path, self.notifier, on_change=self._on_path_changed)
        self.clipboard = ClipboardManager(self.notifier)
        self.tasks = TransferTaskQueue(self.notifier)
        self.transfers = TransferService(self.tasks, commands, max_concurrent=max_concurrent_transfers)
        self.file_ops = FileOperations(commands)

    @classmethod
    def from_settings(
        cls, settings: Settings, commands: DeviceCommands, device_id: str | None = None,
    ) -> "FileBrowser":
        return cls(
            commands,
            device_id=device_id or settings.device_id,
            initial_path=settings.initial_path,
            show_hidden=settings.show_hidden_default,
            max_concurrent_transfers=settings.max_concurrent_transfers,
            preview_max_bytes=settings.preview_max_bytes,
        )

    # ---------- state ----------

    @property
    def device_id(self) -> str | None:
        return self._device_id

    @property
    def current_path(self) -> str:
        return self.navigation.current_path

    def visible_entries(self) -> list[FileEntry]:
        return self.filters.apply(self.loader.files)

    def selected_entries(self) -> list[FileEntry]:
        selected = self.selection.selected
        return [e for e in self.loader.files if e.name in selected]

    def find_entry(self, name: str) -> FileEntry:
        for entry in self.loader.files:
            if entry.name == name:
                return entry
        raise OperationFailed(f"{name}: No such file or directory")

    def _require_device(self) -> str:
        if not self._device_id:
            raise OperationFailed("No device selected")
        return self._device_id

    def _on_path_changed(self, path: str) -> None:
        self.selection.clear_selection()
        self.filters.clear_search()

    def _on_listing_replaced(self) -> None:
        self.selection.clear_selection()

    # ---------- navigation ----------

    async def navigate_to(self, path: str) -> bool:
        if not self.navigation.navigate_to(path):
            return False
        await self.refresh()
        return True

    async def navigate_back(self) -> bool:
        if not self.navigation.navigate_back():
            return False
        await self.refresh()
        return True

    async def navigate_forward(self) -> bool:
        if not self.navigation.navigate_forward():
            return False
        await self.refresh()
        return True

    async def navigate_up(self) -> bool:
        if not self.navigation.navigate_up():
            return False
        await self.refresh()
        return True

    async def open_entry(self, name: str) -> bool:
        """Descend into a directory of the current listing."""
        entry = self.find_entry(name)
        if not entry.is_dir:
            return False
        return await self.navigate_to(join_path(self.current_path, entry.name) + "/")

    async def refresh(self) -> bool:
        return await self.loader.load_files(self._device_id, self.current_path)

    async def select_device(self, device_id: str | None) -> None:
        """Switch devices; the current path is kept and reloaded."""
        self._device_id = device_id or None
        self.selection.clear_selection()
        logger.info("Selected device %s", self._device_id)
        await self.refresh()

    # ---------- clipboard ----------

    def copy_to_clipboard(self) -> int:
        payload = self.clipboard.copy_to_clipboard(self.selected_entries(), self.current_path)
        return len(payload.entries)

    def cut_to_clipboard(self) -> int:
        payload = self.clipboard.cut_to_clipboard(self.selected_entries(), self.current_path)
        return len(payload.entries)

    def is_cut_file(self, name: str) -> bool:
        return self.clipboard.is_cut_file(name, self.current_path)

    async def paste(self) -> PasteResult:
        device_id = self._require_device()
        result = await self.clipboard.paste(self._commands, device_id, self.current_path)
        await self.refresh()
        return result

    # ---------- file operations ----------

    async def create_folder(self, name: str) -> str:
        path = await self.file_ops.create_folder(self._require_device(), self.current_path, name)
        await self.refresh()
        return path

    async def rename_entry(self, name: str, new_name: str) -> str:
        path = await self.file_ops.rename(self._require_device(), self.current_path, name, new_name)
        await self.refresh()
        return path

    async def delete_entries(self, names: list[str] | None = None) -> BatchResult:
        """Delete ``names``, or the current selection when omitted."""
        device_id = self._require_device()
        if names is None:
            names = [e.name for e in self.selected_entries()]
        result = await self.file_ops.delete(device_id, self.current_path, names)
        await self.refresh()
        return result

    async def preview(self, name: str) -> tuple[FileEntry, bytes]:
        device_id = self._require_device()
        entry = self.find_entry(name)
        content = await self.file_ops.read_preview(device_id, self.current_path, entry, self._preview_max_bytes)
        return entry, content

    # ---------- transfers ----------

    def upload_files(self, local_paths: list[str]) -> list[TransferTask]:
        return self.transfers.upload_files(
            self._require_device(), local_paths, self.current_path, on_success=self._after_upload,
        )

    def download(self, name: str, destination: str) -> TransferTask:
        entry = self.find_entry(name)
        return self.transfers.download(
            self._require_device(), join_path(self.current_path, entry.name), entry.name, destination,
        )

    async def _after_upload(self, directory: str) -> None:
        if directory == self.current_path:
            await self.refresh()

    async def close(self) -> None:
        await self.transfers.wait_idle()

    # ---------- presentation ----------

    def snapshot(self) -> BrowserSnapshot:
        payload = self.clipboard.payload
        files = list(self.loader.files)
        return BrowserSnapshot(
            version=self.notifier.version,
            device_id=self._device_id,
            path=self.current_path,
            history=list(self.navigation.history),
            history_index=self.navigation.index,
            can_go_back=self.navigation.can_go_back,
            can_go_forward=self.navigation.can_go_forward,
            is_loading=self.loader.is_loading,
            error=self.loader.error,
            files=files,
            visible_files=self.visible_entries(),
            selected=sorted(self.selection.selected),
            filter=FilterOut(search_query=self.filters.search_query, show_hidden=self.filters.show_hidden),
            clipboard=payload,
            cut_names=[e.name for e in files if self.is_cut_file(e.name)],
            tasks=list(self.tasks.tasks),
        )

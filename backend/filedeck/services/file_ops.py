"""Single-entry remote file operations with local name validation."""

from __future__ import annotations

import logging

from filedeck.schemas.files import BatchResult, FileEntry
from filedeck.services.clipboard import join_path
from filedeck.services.device_commands import DeviceCommands, OperationFailed

logger = logging.getLogger(__name__)


class InvalidName(ValueError):
    """A user-supplied entry name cannot be used as a path segment."""


class PreviewTooLarge(OperationFailed):
    pass


def validate_name(name: str) -> str:
    """Return the trimmed name or raise ``InvalidName``."""
    name = name.strip()
    if not name:
        raise InvalidName("Name cannot be empty")
    if "/" in name or "\\" in name:
        raise InvalidName("Name cannot contain slashes")
    if name in (".", ".."):
        raise InvalidName(f"'{name}' is not a valid name")
    return name


class FileOperations:
    def __init__(self, commands: DeviceCommands):
        self._commands = commands

    async def create_folder(self, device_id: str, directory: str, name: str) -> str:
        path = join_path(directory, validate_name(name))
        await self._commands.create_directory(device_id, path)
        logger.info("Created folder %s", path)
        return path

    async def rename(self, device_id: str, directory: str, name: str, new_name: str) -> str:
        new_name = validate_name(new_name)
        old_path = join_path(directory, name)
        new_path = join_path(directory, new_name)
        if old_path == new_path:
            return new_path
        await self._commands.rename_entry(device_id, old_path, new_path)
        logger.info("Renamed %s -> %s", old_path, new_path)
        return new_path

    async def delete(self, device_id: str, directory: str, names: list[str]) -> BatchResult:
        """Delete entries one by one; failures are collected, not raised."""
        result = BatchResult()
        for name in names:
            path = join_path(directory, name)
            try:
                await self._commands.delete_entry(device_id, path)
                result.succeeded.append(name)
            except OperationFailed as e:
                logger.warning("Failed to delete %s: %s", path, e)
                result.errors[name] = str(e)
        return result

    async def read_preview(self, device_id: str, directory: str, entry: FileEntry, max_bytes: int) -> bytes:
        if entry.is_dir:
            raise OperationFailed(f"{entry.name} is a directory")
        if entry.size is not None and entry.size > max_bytes:
            raise PreviewTooLarge(f"{entry.name} is too large to preview ({entry.size} bytes)")
        return await self._commands.read_file_bytes(device_id, join_path(directory, entry.name))

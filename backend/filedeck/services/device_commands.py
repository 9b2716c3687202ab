"""Device command interface — the only way the browser observes or mutates a device.

Every call is asynchronous and may raise ``OperationFailed`` with an opaque,
displayable message. Two implementations ship:

- ``InMemoryDeviceCommands``: a simulated device tree (dev mode and tests)
- ``HttpDeviceCommands``: delegates to a device bridge service over HTTP
"""

from __future__ import annotations

import asyncio
import logging
import posixpath
from abc import ABC, abstractmethod
from pathlib import Path

import httpx
from pydantic import ValidationError

from filedeck.schemas.files import FileEntry

logger = logging.getLogger(__name__)


class OperationFailed(Exception):
    """A remote operation was rejected; ``str(exc)`` is shown to the user verbatim."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DeviceCommands(ABC):
    """Abstract backend for remote filesystem commands."""

    @abstractmethod
    async def list_directory(self, device_id: str, path: str) -> list[FileEntry]:
        """List a directory. Ordering of the result is unspecified."""
        ...

    @abstractmethod
    async def delete_entry(self, device_id: str, path: str) -> None:
        """Delete a file or a directory tree."""
        ...

    @abstractmethod
    async def rename_entry(self, device_id: str, old_path: str, new_path: str) -> None:
        ...

    @abstractmethod
    async def create_directory(self, device_id: str, path: str) -> None:
        ...

    @abstractmethod
    async def read_file_bytes(self, device_id: str, path: str) -> bytes:
        ...

    @abstractmethod
    async def upload_file(self, device_id: str, local_path: str, remote_path: str) -> None:
        ...

    @abstractmethod
    async def download_file(self, device_id: str, remote_path: str, local_destination: str) -> None:
        ...

    @abstractmethod
    async def copy_entry(self, device_id: str, source_path: str, dest_path: str) -> None:
        ...

    async def move_entry(self, device_id: str, source_path: str, dest_path: str) -> None:
        """Move is a rename unless a backend knows better."""
        await self.rename_entry(device_id, source_path, dest_path)


def _parent(path: str) -> str:
    parent = posixpath.dirname(path.rstrip("/"))
    return parent if parent.endswith("/") else parent + "/"


def _dir_key(path: str) -> str:
    return path if path.endswith("/") else path + "/"


class InMemoryDeviceCommands(DeviceCommands):
    """Simulated device filesystem.

    Directories are keyed with a trailing slash, files without one.
    An optional ``latency`` (seconds) is awaited before every call.
    """

    DIR_PERMISSIONS = "drwxrwx--x"
    FILE_PERMISSIONS = "-rw-rw----"

    def __init__(self, latency: float = 0.0):
        self._latency = latency
        self._dirs: set[str] = {"/"}
        self._files: dict[str, bytes] = {}
        self.calls: list[tuple[str, ...]] = []

    # ---------- seeding ----------

    def add_directory(self, path: str) -> None:
        key = _dir_key(path)
        while key not in self._dirs:
            self._dirs.add(key)
            key = _parent(key)

    def add_file(self, path: str, content: bytes = b"") -> None:
        self.add_directory(_parent(path))
        self._files[path.rstrip("/")] = content

    @classmethod
    def with_sample_tree(cls, latency: float = 0.0) -> "InMemoryDeviceCommands":
        """A small Android-like tree for dev mode."""
        dev = cls(latency=latency)
        for d in ("/sdcard/DCIM/Camera", "/sdcard/Download", "/sdcard/Music", "/sdcard/.thumbnails"):
            dev.add_directory(d)
        dev.add_file("/sdcard/DCIM/Camera/IMG_0001.jpg", b"\xff\xd8\xff" + b"\x00" * 2048)
        dev.add_file("/sdcard/Download/readme.txt", b"Hello from the device\n")
        dev.add_file("/sdcard/.nomedia", b"")
        dev.add_file("/sdcard/notes.txt", b"todo: back up photos\n")
        return dev

    # ---------- helpers ----------

    async def _tick(self, *call: str) -> None:
        self.calls.append(call)
        if self._latency:
            await asyncio.sleep(self._latency)

    def _exists(self, path: str) -> bool:
        return _dir_key(path) in self._dirs or path.rstrip("/") in self._files

    def _require_parent(self, path: str) -> None:
        if _parent(path) not in self._dirs:
            raise OperationFailed(f"{_parent(path)}: No such file or directory")

    def _subtree(self, path: str) -> tuple[list[str], list[str]]:
        key = _dir_key(path)
        dirs = sorted(d for d in self._dirs if d.startswith(key))
        files = sorted(f for f in self._files if f.startswith(key))
        return dirs, files

    # ---------- commands ----------

    async def list_directory(self, device_id: str, path: str) -> list[FileEntry]:
        await self._tick("list_directory", device_id, path)
        key = _dir_key(path)
        if key not in self._dirs:
            raise OperationFailed(f"ls: {path}: No such file or directory")

        entries: list[FileEntry] = []
        base = key.rstrip("/")
        for d in self._dirs:
            if d != key and _parent(d) == key:
                name = d.rstrip("/").rsplit("/", 1)[-1]
                entries.append(FileEntry(
                    name=name, path=f"{base}/{name}", is_dir=True,
                    size=4096, permissions=self.DIR_PERMISSIONS,
                ))
        for f, content in self._files.items():
            if _parent(f) == key:
                name = f.rsplit("/", 1)[-1]
                entries.append(FileEntry(
                    name=name, path=f"{base}/{name}", is_dir=False,
                    size=len(content), permissions=self.FILE_PERMISSIONS,
                ))
        return entries

    async def delete_entry(self, device_id: str, path: str) -> None:
        await self._tick("delete_entry", device_id, path)
        if path.rstrip("/") in self._files:
            del self._files[path.rstrip("/")]
            return
        if _dir_key(path) in self._dirs and _dir_key(path) != "/":
            dirs, files = self._subtree(path)
            for f in files:
                del self._files[f]
            self._dirs.difference_update(dirs)
            return
        raise OperationFailed(f"rm: {path}: No such file or directory")

    async def rename_entry(self, device_id: str, old_path: str, new_path: str) -> None:
        await self._tick("rename_entry", device_id, old_path, new_path)
        if not self._exists(old_path):
            raise OperationFailed(f"mv: {old_path}: No such file or directory")
        if self._exists(new_path):
            raise OperationFailed(f"mv: {new_path}: File exists")
        self._require_parent(new_path)

        if old_path.rstrip("/") in self._files:
            self._files[new_path.rstrip("/")] = self._files.pop(old_path.rstrip("/"))
            return
        old_key, new_key = _dir_key(old_path), _dir_key(new_path)
        if new_key.startswith(old_key):
            raise OperationFailed(f"mv: cannot move '{old_path}' to a subdirectory of itself")
        dirs, files = self._subtree(old_path)
        for d in dirs:
            self._dirs.discard(d)
            self._dirs.add(new_key + d[len(old_key):])
        for f in files:
            self._files[new_key + f[len(old_key):]] = self._files.pop(f)

    async def create_directory(self, device_id: str, path: str) -> None:
        await self._tick("create_directory", device_id, path)
        if self._exists(path):
            raise OperationFailed(f"mkdir: {path}: File exists")
        self._require_parent(path)
        self._dirs.add(_dir_key(path))

    async def read_file_bytes(self, device_id: str, path: str) -> bytes:
        await self._tick("read_file_bytes", device_id, path)
        try:
            return self._files[path.rstrip("/")]
        except KeyError:
            raise OperationFailed(f"cat: {path}: No such file or directory") from None

    async def upload_file(self, device_id: str, local_path: str, remote_path: str) -> None:
        await self._tick("upload_file", device_id, local_path, remote_path)
        self._require_parent(remote_path)
        try:
            content = await asyncio.to_thread(Path(local_path).read_bytes)
        except OSError as e:
            raise OperationFailed(f"cannot stat '{local_path}': {e.strerror or e}") from e
        self._files[remote_path.rstrip("/")] = content

    async def download_file(self, device_id: str, remote_path: str, local_destination: str) -> None:
        await self._tick("download_file", device_id, remote_path, local_destination)
        try:
            content = self._files[remote_path.rstrip("/")]
        except KeyError:
            raise OperationFailed(f"remote object '{remote_path}' does not exist") from None
        try:
            await asyncio.to_thread(Path(local_destination).write_bytes, content)
        except OSError as e:
            raise OperationFailed(f"cannot create '{local_destination}': {e.strerror or e}") from e

    async def copy_entry(self, device_id: str, source_path: str, dest_path: str) -> None:
        await self._tick("copy_entry", device_id, source_path, dest_path)
        if not self._exists(source_path):
            raise OperationFailed(f"cp: {source_path}: No such file or directory")
        self._require_parent(dest_path)

        if source_path.rstrip("/") in self._files:
            self._files[dest_path.rstrip("/")] = self._files[source_path.rstrip("/")]
            return
        src_key, dest_key = _dir_key(source_path), _dir_key(dest_path)
        if dest_key.startswith(src_key):
            raise OperationFailed(f"cp: cannot copy '{source_path}' into itself")
        dirs, files = self._subtree(source_path)
        for d in dirs:
            self._dirs.add(dest_key + d[len(src_key):])
        for f in files:
            self._files[dest_key + f[len(src_key):]] = self._files[f]


class HttpDeviceCommands(DeviceCommands):
    """Device bridge REST client.

    Failures of any kind (transport, non-2xx, malformed body) surface as ``OperationFailed``
    carrying the bridge's ``detail`` message or the response text.
    """

    def __init__(self, base_url: str, timeout: float = 30.0):
        self._base_url = base_url.rstrip("/") + "/api"
        self._timeout = timeout

    def _url(self, device_id: str, suffix: str) -> str:
        return f"{self._base_url}/devices/{device_id}{suffix}"

    @staticmethod
    def _error_message(resp: httpx.Response) -> str:
        try:
            data = resp.json()
        except ValueError:
            return resp.text or f"HTTP {resp.status_code}"
        if isinstance(data, dict) and data.get("detail"):
            return str(data["detail"])
        return resp.text or f"HTTP {resp.status_code}"

    async def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.warning("Device bridge %s %s failed: %s", method, url, e)
            raise OperationFailed(str(e) or type(e).__name__) from e
        if resp.status_code >= 400:
            raise OperationFailed(self._error_message(resp))
        return resp

    async def list_directory(self, device_id: str, path: str) -> list[FileEntry]:
        resp = await self._request("GET", self._url(device_id, "/files"), params={"path": path})
        try:
            return [FileEntry.model_validate(item) for item in resp.json()]
        except (ValueError, TypeError, ValidationError) as e:
            logger.warning("Device bridge returned a malformed listing for %s: %s", path, e)
            raise OperationFailed(f"Malformed listing from device bridge: {path}") from e

    async def delete_entry(self, device_id: str, path: str) -> None:
        await self._request("DELETE", self._url(device_id, "/files"), params={"path": path})

    async def rename_entry(self, device_id: str, old_path: str, new_path: str) -> None:
        await self._request(
            "POST", self._url(device_id, "/files/rename"),
            json={"old_path": old_path, "new_path": new_path},
        )

    async def create_directory(self, device_id: str, path: str) -> None:
        await self._request("POST", self._url(device_id, "/folders"), json={"path": path})

    async def read_file_bytes(self, device_id: str, path: str) -> bytes:
        resp = await self._request("GET", self._url(device_id, "/files/content"), params={"path": path})
        return resp.content

    async def upload_file(self, device_id: str, local_path: str, remote_path: str) -> None:
        await self._request(
            "POST", self._url(device_id, "/push"),
            json={"local_path": local_path, "remote_path": remote_path},
        )

    async def download_file(self, device_id: str, remote_path: str, local_destination: str) -> None:
        await self._request(
            "POST", self._url(device_id, "/pull"),
            json={"remote_path": remote_path, "destination": local_destination},
        )

    async def copy_entry(self, device_id: str, source_path: str, dest_path: str) -> None:
        await self._request(
            "POST", self._url(device_id, "/files/copy"),
            json={"source_path": source_path, "dest_path": dest_path},
        )

    async def move_entry(self, device_id: str, source_path: str, dest_path: str) -> None:
        await self._request(
            "POST", self._url(device_id, "/files/move"),
            json={"source_path": source_path, "dest_path": dest_path},
        )

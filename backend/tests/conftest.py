"""Test fixtures — in-memory device, browser context and FastAPI test client."""

import asyncio

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from filedeck.main import create_app
from filedeck.services.browser import FileBrowser
from filedeck.services.device_commands import InMemoryDeviceCommands, OperationFailed

DEVICE_ID = "emulator-5554"


class GatedDevice(InMemoryDeviceCommands):
    """In-memory device whose listings / uploads can be held until released."""

    def __init__(self):
        super().__init__()
        self.list_gates: dict[str, asyncio.Event] = {}
        self.upload_gates: dict[str, asyncio.Event] = {}
        self.list_failures: dict[str, str] = {}

    def hold_listing(self, path: str) -> asyncio.Event:
        gate = self.list_gates[path] = asyncio.Event()
        return gate

    def hold_upload(self, remote_path: str) -> asyncio.Event:
        gate = self.upload_gates[remote_path] = asyncio.Event()
        return gate

    async def list_directory(self, device_id, path):
        gate = self.list_gates.get(path)
        if gate is not None:
            await gate.wait()
        if path in self.list_failures:
            raise OperationFailed(self.list_failures[path])
        return await super().list_directory(device_id, path)

    async def upload_file(self, device_id, local_path, remote_path):
        gate = self.upload_gates.get(remote_path)
        if gate is not None:
            await gate.wait()
        await super().upload_file(device_id, local_path, remote_path)


@pytest.fixture
def device():
    """Sample device tree plus a plain document folder."""
    dev = GatedDevice()
    for d in ("/sdcard/DCIM/Camera", "/sdcard/Download", "/sdcard/Music", "/sdcard/.thumbnails"):
        dev.add_directory(d)
    dev.add_file("/sdcard/.nomedia")
    dev.add_file("/sdcard/notes.txt", b"todo")
    dev.add_file("/sdcard/Download/readme.txt", b"hello")
    for name in ("a.txt", "b.txt", "c.txt"):
        dev.add_file(f"/sdcard/docs/{name}", name.encode())
    return dev


@pytest.fixture
def browser(device):
    return FileBrowser(device, device_id=DEVICE_ID, initial_path="/sdcard/")


@pytest_asyncio.fixture
async def loaded_browser(browser):
    """Browser with the initial directory already listed."""
    await browser.refresh()
    return browser


@pytest_asyncio.fixture
async def client(browser):
    """Async test client bound to the injected browser context."""
    app = create_app(browser=browser)
    await browser.refresh()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c
    await browser.close()

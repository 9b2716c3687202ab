"""Core services — factory for the browser context owned by the application root."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from filedeck.config import Settings
    from filedeck.services.browser import FileBrowser
    from filedeck.services.device_commands import DeviceCommands

logger = logging.getLogger(__name__)

DEV_DEVICE_ID = "emulator-5554"  # the in-memory device accepts any serial


def build_commands(settings: Settings) -> DeviceCommands:
    """Pick the device command backend for the configured mode."""
    from filedeck.services.device_commands import HttpDeviceCommands, InMemoryDeviceCommands

    if settings.is_dev_mode:
        logger.info("[DEV] Using in-memory device tree")
        return InMemoryDeviceCommands.with_sample_tree()
    return HttpDeviceCommands(settings.device_bridge_url, timeout=settings.request_timeout_seconds)


def create_browser(settings: Settings, commands: DeviceCommands | None = None) -> FileBrowser:
    """Create and wire one browser context."""
    from filedeck.services.browser import FileBrowser

    device_id = settings.device_id
    if settings.is_dev_mode and not device_id:
        device_id = DEV_DEVICE_ID
    browser = FileBrowser.from_settings(settings, commands or build_commands(settings), device_id=device_id)
    logger.info(
        "File browser ready — device=%s path=%s transfers=%s",
        browser.device_id, browser.current_path,
        settings.max_concurrent_transfers or "unbounded",
    )
    return browser

"""Browser state routes — navigation, selection, filters and clipboard."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from filedeck.api.deps import get_browser, remote_errors
from filedeck.schemas.browser import (
    BrowserSnapshot,
    DeviceRequest,
    FilterUpdate,
    NameRequest,
    NavigateRequest,
    RangeRequest,
)
from filedeck.schemas.files import PasteResult
from filedeck.services.browser import FileBrowser

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("", response_model=BrowserSnapshot)
async def get_state(browser: FileBrowser = Depends(get_browser)):
    """Current browser state; poll and compare ``version`` to detect changes."""
    return browser.snapshot()


# ---------- navigation ----------

@router.post("/navigate", response_model=BrowserSnapshot)
async def navigate(body: NavigateRequest, browser: FileBrowser = Depends(get_browser)):
    path = body.path if body.path.endswith("/") else body.path + "/"
    await browser.navigate_to(path)
    return browser.snapshot()


@router.post("/open", response_model=BrowserSnapshot)
async def open_entry(body: NameRequest, browser: FileBrowser = Depends(get_browser)):
    """Descend into a directory of the current listing."""
    with remote_errors():
        await browser.open_entry(body.name)
    return browser.snapshot()


@router.post("/back", response_model=BrowserSnapshot)
async def back(browser: FileBrowser = Depends(get_browser)):
    await browser.navigate_back()
    return browser.snapshot()


@router.post("/forward", response_model=BrowserSnapshot)
async def forward(browser: FileBrowser = Depends(get_browser)):
    await browser.navigate_forward()
    return browser.snapshot()


@router.post("/up", response_model=BrowserSnapshot)
async def up(browser: FileBrowser = Depends(get_browser)):
    await browser.navigate_up()
    return browser.snapshot()


@router.post("/refresh", response_model=BrowserSnapshot)
async def refresh(browser: FileBrowser = Depends(get_browser)):
    await browser.refresh()
    return browser.snapshot()


@router.post("/device", response_model=BrowserSnapshot)
async def select_device(body: DeviceRequest, browser: FileBrowser = Depends(get_browser)):
    await browser.select_device(body.device_id)
    return browser.snapshot()


# ---------- selection & filter ----------

@router.post("/selection/toggle", response_model=BrowserSnapshot)
async def toggle_selection(body: NameRequest, browser: FileBrowser = Depends(get_browser)):
    browser.selection.toggle_selection(body.name)
    return browser.snapshot()


@router.post("/selection/all", response_model=BrowserSnapshot)
async def select_all(browser: FileBrowser = Depends(get_browser)):
    browser.selection.select_all()
    return browser.snapshot()


@router.post("/selection/clear", response_model=BrowserSnapshot)
async def clear_selection(browser: FileBrowser = Depends(get_browser)):
    browser.selection.clear_selection()
    return browser.snapshot()


@router.post("/selection/range", response_model=BrowserSnapshot)
async def select_range(body: RangeRequest, browser: FileBrowser = Depends(get_browser)):
    browser.selection.select_range(body.from_name, body.to_name)
    return browser.snapshot()


@router.put("/filter", response_model=BrowserSnapshot)
async def update_filter(body: FilterUpdate, browser: FileBrowser = Depends(get_browser)):
    if body.search_query is not None:
        browser.filters.set_search_query(body.search_query)
    if body.show_hidden is not None:
        browser.filters.set_show_hidden(body.show_hidden)
    return browser.snapshot()


# ---------- clipboard ----------

@router.post("/clipboard/copy", response_model=BrowserSnapshot)
async def copy(browser: FileBrowser = Depends(get_browser)):
    count = browser.copy_to_clipboard()
    logger.info("%d item(s) copied", count)
    return browser.snapshot()


@router.post("/clipboard/cut", response_model=BrowserSnapshot)
async def cut(browser: FileBrowser = Depends(get_browser)):
    count = browser.cut_to_clipboard()
    logger.info("%d item(s) cut", count)
    return browser.snapshot()


@router.post("/clipboard/clear", response_model=BrowserSnapshot)
async def clear_clipboard(browser: FileBrowser = Depends(get_browser)):
    browser.clipboard.clear_clipboard()
    return browser.snapshot()


@router.post("/clipboard/paste", response_model=PasteResult)
async def paste(browser: FileBrowser = Depends(get_browser)):
    with remote_errors():
        return await browser.paste()

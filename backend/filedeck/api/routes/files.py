"""File operation routes — folders, rename, delete, preview."""

from __future__ import annotations

import base64

from fastapi import APIRouter, Depends

from filedeck.api.deps import get_browser, remote_errors
from filedeck.schemas.browser import BrowserSnapshot, DeleteRequest, NameRequest, RenameRequest
from filedeck.schemas.files import BatchResult, FilePreview
from filedeck.services.browser import FileBrowser

router = APIRouter()


@router.post("/folder", response_model=BrowserSnapshot)
async def create_folder(body: NameRequest, browser: FileBrowser = Depends(get_browser)):
    """Create a folder in the current directory."""
    with remote_errors():
        await browser.create_folder(body.name)
    return browser.snapshot()


@router.post("/rename", response_model=BrowserSnapshot)
async def rename(body: RenameRequest, browser: FileBrowser = Depends(get_browser)):
    with remote_errors():
        await browser.rename_entry(body.name, body.new_name)
    return browser.snapshot()


@router.post("/delete", response_model=BatchResult)
async def delete(body: DeleteRequest, browser: FileBrowser = Depends(get_browser)):
    """Delete named entries, or the selection when no names are given."""
    with remote_errors():
        return await browser.delete_entries(body.names)


@router.get("/preview", response_model=FilePreview)
async def preview(name: str, browser: FileBrowser = Depends(get_browser)):
    with remote_errors():
        entry, content = await browser.preview(name)
    return FilePreview(
        name=entry.name,
        path=entry.path,
        size=len(content),
        content_base64=base64.b64encode(content).decode("ascii"),
    )

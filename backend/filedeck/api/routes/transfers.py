"""Transfer routes — background uploads and downloads."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from filedeck.api.deps import get_browser, remote_errors
from filedeck.schemas.transfers import DownloadRequest, SubmittedTasks, TransferTask, UploadRequest
from filedeck.services.browser import FileBrowser

router = APIRouter()


@router.get("", response_model=list[TransferTask])
async def list_tasks(browser: FileBrowser = Depends(get_browser)):
    """All tasks, newest first."""
    return list(browser.tasks.tasks)


@router.post("/upload", response_model=SubmittedTasks, status_code=202)
async def upload(body: UploadRequest, browser: FileBrowser = Depends(get_browser)):
    """Upload local files into the current directory."""
    with remote_errors():
        tasks = browser.upload_files(body.local_paths)
    return SubmittedTasks(task_ids=[t.id for t in tasks])


@router.post("/download", response_model=SubmittedTasks, status_code=202)
async def download(body: DownloadRequest, browser: FileBrowser = Depends(get_browser)):
    with remote_errors():
        task = browser.download(body.name, body.destination)
    return SubmittedTasks(task_ids=[task.id])


@router.post("/clear")
async def clear_completed(browser: FileBrowser = Depends(get_browser)):
    """Discard completed and failed tasks."""
    return {"removed": browser.tasks.clear_completed()}


@router.delete("/{task_id}")
async def remove_task(task_id: str, browser: FileBrowser = Depends(get_browser)):
    if not browser.tasks.remove_task(task_id):
        raise HTTPException(status_code=404, detail="Task not found")
    return {"status": "ok"}

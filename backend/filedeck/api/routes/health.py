"""Health check."""

from fastapi import APIRouter, Depends

from filedeck import __version__
from filedeck.api.deps import get_browser
from filedeck.config import settings
from filedeck.schemas.system import HealthResponse
from filedeck.services.browser import FileBrowser

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check(browser: FileBrowser = Depends(get_browser)):
    """Lightweight liveness check with the selected device."""
    return HealthResponse(version=__version__, mode=settings.mode, device_id=browser.device_id)


@router.get("/ping")
async def ping():
    """Ultra-lightweight ping."""
    return {"status": "ok"}

"""API route registration."""

from fastapi import APIRouter

from filedeck.api.routes import browser, files, health, transfers

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(browser.router, prefix="/browser", tags=["browser"])
api_router.include_router(files.router, prefix="/files", tags=["files"])
api_router.include_router(transfers.router, prefix="/transfers", tags=["transfers"])

"""FastAPI dependency injection — the browser context and error mapping."""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException, Request, status

from filedeck.services.browser import FileBrowser
from filedeck.services.device_commands import OperationFailed
from filedeck.services.file_ops import InvalidName

logger = logging.getLogger(__name__)


def get_browser(request: Request) -> FileBrowser:
    """Return the browser owned by the running application."""
    browser = getattr(request.app.state, "browser", None)
    if browser is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="File browser not initialized",
        )
    return browser


@contextmanager
def remote_errors() -> Iterator[None]:
    """Translate core errors into HTTP responses."""
    try:
        yield
    except InvalidName as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except OperationFailed as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

"""Directory loading with stale-response suppression."""

from __future__ import annotations

import itertools
import logging
from typing import Callable

from filedeck.schemas.files import FileEntry, sort_listing
from filedeck.services.device_commands import DeviceCommands, OperationFailed
from filedeck.services.events import ChangeNotifier, Topic

logger = logging.getLogger(__name__)


class DirectoryLoader:
    """Fetches listings and owns the loading/error state.

    Every ``load_files`` call takes a fresh token; a response is applied only
    if its token is still the latest issued, so a slow reply for a path the
    user already left can never overwrite a newer listing. ``is_loading``
    reflects the latest request only.
    """

    def __init__(
        self,
        commands: DeviceCommands,
        notifier: ChangeNotifier | None = None,
        on_loaded: Callable[[], None] | None = None,
    ):
        self._commands = commands
        self._notifier = notifier
        self._on_loaded = on_loaded
        self._tokens = itertools.count(1)
        self._latest_token = 0
        self._files: tuple[FileEntry, ...] = ()
        self._loaded_path: str | None = None
        self._is_loading = False
        self._error: str | None = None

    @property
    def files(self) -> tuple[FileEntry, ...]:
        return self._files

    @property
    def loaded_path(self) -> str | None:
        """Path the current listing belongs to."""
        return self._loaded_path

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def latest_token(self) -> int:
        return self._latest_token

    def _is_current(self, token: int) -> bool:
        return token == self._latest_token

    async def load_files(self, device_id: str | None, path: str) -> bool:
        """Load ``path``. Returns True if this response was applied."""
        if not device_id:
            return False

        token = next(self._tokens)
        self._latest_token = token
        self._is_loading = True
        self._error = None
        self._emit()

        try:
            entries = await self._commands.list_directory(device_id, path)
        except OperationFailed as e:
            if not self._is_current(token):
                logger.debug("Discarding stale failure for %s (token %d)", path, token)
                return False
            logger.warning("Listing %s failed: %s", path, e)
            self._files = ()
            self._loaded_path = path
            self._error = str(e)
            return True
        else:
            if not self._is_current(token):
                logger.debug("Discarding stale listing for %s (token %d)", path, token)
                return False
            self._files = tuple(sort_listing(entries))
            self._loaded_path = path
            logger.info("Loaded %s (%d entries)", path, len(self._files))
            if self._on_loaded:
                self._on_loaded()
            return True
        finally:
            if self._is_current(token):
                self._is_loading = False
                self._emit()

    def _emit(self) -> None:
        if self._notifier:
            self._notifier.emit(Topic.LISTING)

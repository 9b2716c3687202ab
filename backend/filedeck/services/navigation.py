"""Navigation history — browser-style back/forward over visited directory paths."""

from __future__ import annotations

import logging
from typing import Callable

from filedeck.services.events import ChangeNotifier, Topic

logger = logging.getLogger(__name__)


def parent_path(path: str) -> str:
    """Strip the last non-empty segment, keeping the trailing slash convention."""
    segments = [s for s in path.split("/") if s]
    if not segments:
        return "/"
    return "/" + "".join(f"{s}/" for s in segments[:-1])


class NavigationController:
    """Owns the current path and the history stack.

    Invariant: ``0 <= index < len(history)``. History is replaced as a whole
    tuple on every change. ``on_change`` runs after each effective move and is
    where the owner clears selection and search text.
    """

    def __init__(
        self,
        initial_path: str = "/",
        notifier: ChangeNotifier | None = None,
        on_change: Callable[[str], None] | None = None,
    ):
        self._history: tuple[str, ...] = (initial_path,)
        self._index = 0
        self._notifier = notifier
        self._on_change = on_change

    @property
    def current_path(self) -> str:
        return self._history[self._index]

    @property
    def history(self) -> tuple[str, ...]:
        return self._history

    @property
    def index(self) -> int:
        return self._index

    @property
    def can_go_back(self) -> bool:
        return self._index > 0

    @property
    def can_go_forward(self) -> bool:
        return self._index < len(self._history) - 1

    def navigate_to(self, path: str) -> bool:
        """Push ``path``, dropping any forward history. Returns False on no-op."""
        if path == self.current_path:
            return False
        self._history = self._history[: self._index + 1] + (path,)
        self._index = len(self._history) - 1
        self._changed()
        return True

    def navigate_back(self) -> bool:
        if not self.can_go_back:
            return False
        self._index -= 1
        self._changed()
        return True

    def navigate_forward(self) -> bool:
        if not self.can_go_forward:
            return False
        self._index += 1
        self._changed()
        return True

    def navigate_up(self) -> bool:
        if self.current_path in ("/", ""):
            return False
        return self.navigate_to(parent_path(self.current_path))

    def _changed(self) -> None:
        logger.info("Navigated to %s (%d/%d)", self.current_path, self._index + 1, len(self._history))
        if self._on_change:
            self._on_change(self.current_path)
        if self._notifier:
            self._notifier.emit(Topic.NAVIGATION)

"""Change notification for presentation layers that poll or subscribe."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable

logger = logging.getLogger(__name__)


class Topic(str, Enum):
    NAVIGATION = "navigation"
    LISTING = "listing"
    SELECTION = "selection"
    FILTER = "filter"
    CLIPBOARD = "clipboard"
    TASKS = "tasks"


Subscriber = Callable[[Topic, int], None]


class ChangeNotifier:
    """Synchronous fan-out of change topics with a monotonically increasing version."""

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []
        self._version = 0

    @property
    def version(self) -> int:
        return self._version

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback(topic, version)``. Returns an unsubscribe function."""
        self._subscribers = [*self._subscribers, callback]

        def _unsubscribe() -> None:
            self._subscribers = [s for s in self._subscribers if s is not callback]

        return _unsubscribe

    def emit(self, topic: Topic) -> None:
        self._version += 1
        for callback in self._subscribers:
            try:
                callback(topic, self._version)
            except Exception:
                logger.exception("Change subscriber failed for topic %s", topic.value)

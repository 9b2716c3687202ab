"""Selection and display filters over the current listing."""

from __future__ import annotations

import logging
from typing import Callable, Sequence

from filedeck.schemas.files import FileEntry
from filedeck.services.events import ChangeNotifier, Topic

logger = logging.getLogger(__name__)


class FilterState:
    """Search text and hidden-file toggle. Filtering never touches the selection."""

    def __init__(self, show_hidden: bool = True, notifier: ChangeNotifier | None = None):
        self._search_query = ""
        self._show_hidden = show_hidden
        self._notifier = notifier

    @property
    def search_query(self) -> str:
        return self._search_query

    @property
    def show_hidden(self) -> bool:
        return self._show_hidden

    def set_search_query(self, query: str) -> None:
        if query == self._search_query:
            return
        self._search_query = query
        self._emit()

    def set_show_hidden(self, show: bool) -> None:
        if show == self._show_hidden:
            return
        self._show_hidden = show
        self._emit()

    def clear_search(self) -> None:
        self.set_search_query("")

    def matches(self, entry: FileEntry) -> bool:
        if entry.is_parent_sentinel:
            return False
        if not self._show_hidden and entry.is_hidden:
            return False
        query = self._search_query.strip().lower()
        return not query or query in entry.name.lower()

    def apply(self, entries: Sequence[FileEntry]) -> list[FileEntry]:
        return [e for e in entries if self.matches(e)]

    def _emit(self) -> None:
        if self._notifier:
            self._notifier.emit(Topic.FILTER)


class SelectionModel:
    """Set of selected entry names.

    Names are not reconciled against the listing: a selected entry hidden by a
    filter stays selected until cleared. Every mutation replaces the frozenset.
    ``listing`` supplies the full current listing; ``displayed`` the entries
    in current display order with filters applied.
    """

    def __init__(
        self,
        listing: Callable[[], Sequence[FileEntry]],
        displayed: Callable[[], Sequence[FileEntry]],
        notifier: ChangeNotifier | None = None,
    ):
        self._listing = listing
        self._displayed = displayed
        self._notifier = notifier
        self._selected: frozenset[str] = frozenset()

    @property
    def selected(self) -> frozenset[str]:
        return self._selected

    def is_selected(self, name: str) -> bool:
        return name in self._selected

    def toggle_selection(self, name: str) -> None:
        self._replace(self._selected ^ {name})

    def select_all(self) -> None:
        self._replace(frozenset(e.name for e in self._listing() if not e.is_parent_sentinel))

    def clear_selection(self) -> None:
        self._replace(frozenset())

    def select_range(self, from_name: str, to_name: str) -> None:
        """Add the inclusive span between two displayed names to the selection."""
        names = [e.name for e in self._displayed() if not e.is_parent_sentinel]
        try:
            start, end = names.index(from_name), names.index(to_name)
        except ValueError:
            logger.debug("Range %r..%r not in displayed listing", from_name, to_name)
            return
        if start > end:
            start, end = end, start
        self._replace(self._selected | frozenset(names[start : end + 1]))

    def _replace(self, selected: frozenset[str]) -> None:
        if selected == self._selected:
            return
        self._selected = selected
        if self._notifier:
            self._notifier.emit(Topic.SELECTION)

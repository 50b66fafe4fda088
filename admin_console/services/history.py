"""In-memory stand-in for the browser history a list view writes to."""

from __future__ import annotations

from typing import Protocol


class HistoryWriter(Protocol):
    @property
    def current(self) -> str: ...

    def replace(self, query: str) -> None: ...


class BrowserHistory:
    """Ordered query-string entries with push/replace semantics.

    Navigation into a page pushes an entry; list views only ever replace
    the current one, so typing in a search box does not grow the history.
    """

    def __init__(self, initial: str = "") -> None:
        self.entries: list[str] = [initial.lstrip("?")]
        self.replace_count = 0

    @property
    def current(self) -> str:
        return self.entries[-1]

    def push(self, query: str) -> None:
        self.entries.append(query.lstrip("?"))

    def replace(self, query: str) -> None:
        self.entries[-1] = query.lstrip("?")
        self.replace_count += 1

"""Registry of list page declarations, keyed by page key."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from admin_console.models.page import PageConfig

logger = logging.getLogger(__name__)


class PageRegistry:
    """Holds the ``PageConfig`` of every list page the console serves."""

    def __init__(self, pages: Iterable[PageConfig] = ()) -> None:
        self._pages: dict[str, PageConfig] = {}
        for page in pages:
            self.register_page(page)

    def register_page(self, page: PageConfig) -> None:
        """Register *page*; a later registration replaces an earlier one."""
        if page.key in self._pages:
            logger.warning("Replacing list page declaration %s", page.key)
        self._pages[page.key] = page

    def get_page(self, key: str) -> PageConfig | None:
        """Return the page registered under *key*, or ``None``."""
        return self._pages.get(key)

    def list_pages(self) -> list[PageConfig]:
        """Return all pages in registration order."""
        return list(self._pages.values())

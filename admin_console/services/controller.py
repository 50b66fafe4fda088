"""URL-synchronized list view controller.

One ``ListViewController`` drives one mounted list page.  It owns the
``ViewState``, fetches the raw collection through a ``CollectionSource``,
recomputes the projection on every state or data change, and is the only
writer of the page's URL query string (always by replacing the current
history entry).

Status transitions::

    idle -> loading -> ready | error
    ready | error -> loading          (refresh)

State mutations are synchronous.  The only awaited operation is the fetch,
and at most one fetch is in flight per controller.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any

from admin_console.models.list_view import ControllerStatus, ListViewSnapshot
from admin_console.models.page import PageConfig
from admin_console.models.view_state import (
    SORT_ORDERS,
    VIEW_MODES,
    ProjectionResult,
    ViewState,
)
from admin_console.repositories.backend_client import CollectionSource, FetchFailure
from admin_console.services.history import BrowserHistory, HistoryWriter
from admin_console.services.pagination import clamp_page, page_range, total_pages
from admin_console.services.projector import CollectionProjector
from admin_console.services.query_codec import QueryStateCodec
from admin_console.services.time_window import (
    TimeWindowClassifier,
    normalize_time_window,
    time_window_label,
)
from admin_console.services.viewport import ViewportModePolicy, ViewportObserver

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[ListViewSnapshot], None]

_TRANSITIONS: dict[str, set[str]] = {
    "idle": {"loading"},
    "loading": {"ready", "error"},
    "ready": {"loading"},
    "error": {"loading"},
}


class ListViewController:
    """Orchestrates codec, projector and viewport policy for one page."""

    def __init__(
        self,
        page: PageConfig,
        source: CollectionSource,
        *,
        viewport: ViewportObserver,
        policy: ViewportModePolicy | None = None,
        classifier: TimeWindowClassifier | None = None,
        history: HistoryWriter | None = None,
        path_params: dict[str, str] | None = None,
        max_page_size: int | None = None,
        page_size_options: Sequence[int] = (10, 20, 50, 100),
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.page = page
        self.source = source
        self.viewport = viewport
        self.policy = policy or ViewportModePolicy()
        self.classifier = classifier or TimeWindowClassifier()
        self.history = history or BrowserHistory()
        self.path_params = dict(path_params or {})
        self.max_page_size = max_page_size
        self.page_size_options = list(page_size_options)
        self.clock = clock

        self.codec = QueryStateCodec(page, self.policy, max_page_size)
        self.projector = CollectionProjector(page, self.classifier)

        self.status: ControllerStatus = "idle"
        self.state: ViewState = self.codec.decode("", viewport.width)
        self.projection = ProjectionResult()
        self.error: str | None = None

        self._records: list[dict[str, Any]] = []
        self._server_total: int | None = None
        self._server_pages: int | None = None
        self._last_query: str | None = None
        self._inflight: asyncio.Task | None = None
        self._scheduled: set[asyncio.Task] = set()
        self._listeners: list[SnapshotListener] = []
        self._unsubscribe_viewport: Callable[[], None] | None = None
        self._disposed = False

    # ------------------------------------------------------------------
    # Presentation-facing properties
    # ------------------------------------------------------------------

    @property
    def is_loading(self) -> bool:
        return self.status == "loading"

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def query(self) -> str:
        """Canonical query string of the current state."""
        return self.codec.encode(self.state)

    @property
    def total_pages(self) -> int:
        if self.page.server_paginated and self._server_pages is not None:
            return max(1, self._server_pages)
        return total_pages(self.projection.total_matched, self.state.page_size)

    @property
    def active_filter_count(self) -> int:
        return sum(1 for value in self.state.filters.values() if value)

    def snapshot(self) -> ListViewSnapshot:
        """Render-ready view of the current state and projection."""
        last_page = self.total_pages
        return ListViewSnapshot(
            page_key=self.page.key,
            status=self.status,
            is_loading=self.is_loading,
            error=self.error,
            state=self.state,
            query=self.query,
            rows=self.projection.rows,
            total_matched=self.projection.total_matched,
            server_total=self._server_total,
            total_pages=last_page,
            page_range=page_range(self.state.page, last_page),
            time_window_label=time_window_label(self.state.time_window),
            show_total_banner=self.state.time_window != "none",
            active_filter_count=self.active_filter_count,
            filter_options=self.projector.filter_options(self._records),
            total_sum=self.projection.total_sum,
            page_size_options=self.page_size_options,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def mount(self, query: str | None = None) -> None:
        """Decode the initial state from the URL and load the collection.

        *query* defaults to the current history entry.
        """
        if self.status != "idle" or self._disposed:
            raise RuntimeError(f"List view for page '{self.page.key}' is already mounted")

        initial = self.history.current if query is None else query.lstrip("?")
        self._last_query = initial
        self.state = self.codec.decode(initial, self.viewport.width)
        self._unsubscribe_viewport = self.viewport.subscribe(self.on_resize)
        logger.info("Mounted list view %s with %r", self.page.key, initial)

        await self.refresh()

    async def refresh(self) -> None:
        """(Re)load the collection; joins a fetch that is already running."""
        if self._disposed:
            return
        if self._inflight is None or self._inflight.done():
            self._inflight = asyncio.ensure_future(self._load())
        await asyncio.shield(self._inflight)

    async def settle(self) -> None:
        """Wait until scheduled and in-flight fetches have finished."""
        while True:
            pending = [task for task in self._scheduled if not task.done()]
            if self._inflight is not None and not self._inflight.done():
                pending.append(self._inflight)
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def dispose(self) -> None:
        """Detach from the viewport; later fetch results are discarded."""
        if self._disposed:
            return
        self._disposed = True
        if self._unsubscribe_viewport is not None:
            self._unsubscribe_viewport()
            self._unsubscribe_viewport = None
        self._listeners.clear()
        logger.info("Disposed list view %s", self.page.key)

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Call *listener* with a snapshot after every transition."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # State mutations
    # ------------------------------------------------------------------

    def set_search(self, search: str) -> None:
        self._apply(search=search or "", page=1)

    def set_filter(self, key: str, value: str | None) -> None:
        normalized = self.codec.normalize_filter(key, value)
        if normalized is None:
            logger.warning("Ignoring filter %r not declared by page %s", key, self.page.key)
            return
        self._apply(filters={**self.state.filters, key: normalized}, page=1)

    def set_time_window(self, window: str | None) -> None:
        self._apply(time_window=normalize_time_window(window), page=1)

    def set_sort(self, sort_by: str, sort_order: str | None = None) -> None:
        """Sort by *sort_by*; keeps the current direction unless one is given."""
        if sort_by not in self.page.sortable_keys:
            logger.warning(
                "Unknown sort key %r for page %s, using %s",
                sort_by,
                self.page.key,
                self.page.defaults.sort_by,
            )
            sort_by = self.page.defaults.sort_by
        if sort_order not in SORT_ORDERS:
            sort_order = self.state.sort_order
        self._apply(sort_by=sort_by, sort_order=sort_order)

    def toggle_sort_order(self) -> None:
        self._apply(sort_order="asc" if self.state.sort_order == "desc" else "desc")

    def set_page(self, page: int) -> None:
        """Jump to *page*, clamped into the available range."""
        target = clamp_page(page, self.total_pages) if self.status == "ready" else max(page, 1)
        if target == self.state.page:
            return
        self._apply(page=target)
        if self.page.server_paginated:
            self._schedule_refresh()

    def set_page_size(self, page_size: int) -> None:
        if page_size < 1:
            logger.debug("Ignoring page size %d", page_size)
            return
        if self.max_page_size is not None:
            page_size = min(page_size, self.max_page_size)
        self._apply(page_size=page_size, page=1)
        if self.page.server_paginated:
            self._schedule_refresh()

    def set_view_mode(self, view_mode: str) -> None:
        """Manual grid/table toggle; marks the mode as explicit."""
        if view_mode not in VIEW_MODES:
            logger.warning("Ignoring unknown view mode %r", view_mode)
            return
        self._apply(view_mode=view_mode, view_mode_is_explicit=True)

    def on_resize(self, viewport_width: int) -> None:
        """Viewport listener: re-apply the breakpoint policy."""
        mode = self.policy.on_resize(viewport_width, self.state)
        if mode != self.state.view_mode:
            self._apply(view_mode=mode)

    def reset_filters(self) -> None:
        """Clear field filters and restore the default sort."""
        defaults = self.page.defaults
        self._apply(
            filters={key: "" for key in self.state.filters},
            sort_by=defaults.sort_by,
            sort_order=defaults.sort_order,
            page=1,
        )

    def clear_all(self) -> None:
        """Clear search, time window and filters, and restore the default sort."""
        defaults = self.page.defaults
        self._apply(
            search="",
            time_window="none",
            filters={key: "" for key in self.state.filters},
            sort_by=defaults.sort_by,
            sort_order=defaults.sort_order,
            page=1,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _now(self) -> datetime | None:
        return self.clock() if self.clock is not None else None

    def _transition(self, status: ControllerStatus) -> None:
        if status not in _TRANSITIONS[self.status]:
            raise RuntimeError(f"Invalid list view transition {self.status} -> {status}")
        logger.debug("List view %s: %s -> %s", self.page.key, self.status, status)
        self.status = status

    def _apply(self, **changes: Any) -> None:
        if self._disposed or self.status == "idle":
            logger.debug("Ignoring %s on unmounted list view %s", sorted(changes), self.page.key)
            return
        self.state = self.state.model_copy(update=changes)
        self._recompute()

    def _recompute(self) -> None:
        paginate = not self.page.server_paginated
        now = self._now()
        self.projection = self.projector.project(
            self._records, self.state, now=now, paginate=paginate
        )

        if self.status == "ready" and paginate:
            last_page = total_pages(self.projection.total_matched, self.state.page_size)
            if self.state.page > last_page:
                self.state = self.state.model_copy(update={"page": last_page})
                self.projection = self.projector.project(self._records, self.state, now=now)

        self._sync_url()
        self._notify()

    def _sync_url(self) -> None:
        query = self.codec.encode(self.state)
        if query != self._last_query:
            self.history.replace(query)
            self._last_query = query

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("List view listener raised for page %s", self.page.key)

    def _schedule_refresh(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running loop; page %s will refetch on next refresh", self.page.key)
            return
        task = loop.create_task(self.refresh())
        self._scheduled.add(task)
        task.add_done_callback(self._scheduled.discard)

    async def _load(self) -> None:
        self._transition("loading")
        self._notify()

        try:
            while True:
                requested = (self.state.page, self.state.page_size)
                fetched = await self.source.fetch(
                    self.page,
                    path_params=self.path_params,
                    page_number=requested[0],
                    page_size=requested[1],
                )
                # Server pages must match the latest requested page
                if not self.page.server_paginated or self._disposed:
                    break
                if requested == (self.state.page, self.state.page_size):
                    break
        except Exception as exc:
            if self._disposed:
                logger.debug("Discarding fetch failure for disposed list view %s", self.page.key)
                return
            if isinstance(exc, FetchFailure):
                logger.warning("Fetch failed for page %s: %s", self.page.key, exc)
                message = exc.message
            else:
                logger.exception("Unexpected error fetching page %s", self.page.key)
                message = None
            self._records = []
            self._server_total = None
            self._server_pages = None
            self.error = message or self._default_error_message()
            self._transition("error")
            self._recompute()
            return

        if self._disposed:
            logger.debug("Discarding fetch result for disposed list view %s", self.page.key)
            return

        self._records = fetched.records
        if self.page.server_paginated:
            self._server_total = fetched.total
            self._server_pages = fetched.pages
        self.error = None
        self._transition("ready")
        logger.info("Loaded %d records for page %s", len(self._records), self.page.key)
        self._recompute()

    def _default_error_message(self) -> str:
        return self.page.fetch_error_message or f"Failed to fetch {self.page.title.lower()}"

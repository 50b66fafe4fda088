"""Construction and in-memory tracking of list view controllers.

``ListViewFactory`` wires a controller from application settings; the
``SessionStore`` keeps long-lived controllers addressable by id so a client
can stream events at the same view.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from admin_console.config import Settings
from admin_console.models.page import PageConfig
from admin_console.repositories.backend_client import CollectionSource
from admin_console.services.controller import ListViewController
from admin_console.services.history import BrowserHistory
from admin_console.services.time_window import TimeWindowClassifier
from admin_console.services.viewport import ViewportModePolicy, ViewportObserver

logger = logging.getLogger(__name__)


class SessionLimitError(Exception):
    """Raised when the store already holds ``max_sessions`` sessions."""


@dataclass
class ListSession:
    """One open list view and the collaborators it is wired to."""

    session_id: str
    controller: ListViewController
    viewport: ViewportObserver
    history: BrowserHistory


class ListViewFactory:
    """Build controllers that share one source, policy and calendar."""

    def __init__(
        self,
        source: CollectionSource,
        settings: Settings,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.source = source
        self.settings = settings
        self.clock = clock
        self.policy = ViewportModePolicy(
            breakpoint=settings.view_breakpoint,
            honor_explicit=settings.honor_explicit_view_mode,
            default_width=settings.default_viewport_width,
        )
        self.classifier = TimeWindowClassifier(
            tz=settings.timezone, week_starts_on=settings.week_starts_on
        )

    def create(
        self,
        page: PageConfig,
        *,
        viewport: ViewportObserver,
        history: BrowserHistory,
        path_params: dict[str, str] | None = None,
    ) -> ListViewController:
        return ListViewController(
            page,
            self.source,
            viewport=viewport,
            policy=self.policy,
            classifier=self.classifier,
            history=history,
            path_params=path_params,
            max_page_size=self.settings.max_page_size,
            page_size_options=self.settings.page_size_options,
            clock=self.clock,
        )

    def open(
        self,
        page: PageConfig,
        *,
        query: str = "",
        viewport_width: int | None = None,
        path_params: dict[str, str] | None = None,
    ) -> tuple[ListViewController, ViewportObserver, BrowserHistory]:
        """Create an unmounted controller with its own viewport and history."""
        width = self.settings.default_viewport_width if viewport_width is None else viewport_width
        viewport = ViewportObserver(width)
        history = BrowserHistory(query)
        controller = self.create(
            page, viewport=viewport, history=history, path_params=path_params
        )
        return controller, viewport, history


class SessionStore:
    """In-memory map of session id to open list view."""

    def __init__(self, factory: ListViewFactory, max_sessions: int = 256) -> None:
        self.factory = factory
        self.max_sessions = max_sessions
        self._sessions: dict[str, ListSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def open(
        self,
        page: PageConfig,
        *,
        query: str = "",
        viewport_width: int | None = None,
        path_params: dict[str, str] | None = None,
    ) -> ListSession:
        """Register a new, not yet mounted, session for *page*."""
        if len(self._sessions) >= self.max_sessions:
            raise SessionLimitError(
                f"Maximum of {self.max_sessions} open list views reached"
            )
        controller, viewport, history = self.factory.open(
            page, query=query, viewport_width=viewport_width, path_params=path_params
        )
        session = ListSession(
            session_id=str(uuid.uuid4()),
            controller=controller,
            viewport=viewport,
            history=history,
        )
        self._sessions[session.session_id] = session
        logger.info("Opened list view session %s for page %s", session.session_id, page.key)
        return session

    def get(self, session_id: str) -> ListSession | None:
        return self._sessions.get(session_id)

    def close(self, session_id: str) -> bool:
        """Dispose and forget a session; returns ``False`` if it was unknown."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.controller.dispose()
        return True

    def close_all(self) -> None:
        for session_id in list(self._sessions):
            self.close(session_id)

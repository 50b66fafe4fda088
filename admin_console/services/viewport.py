"""Grid/table view-mode policy and the viewport observer it listens to."""

from __future__ import annotations

import logging
from collections.abc import Callable

from admin_console.models.view_state import ViewMode, ViewState

logger = logging.getLogger(__name__)

ResizeListener = Callable[[int], None]


class ViewportModePolicy:
    """Choose the view mode from viewport width.

    Wide viewports (``width >= breakpoint``) get the table, narrow ones the
    grid.  With ``honor_explicit=False`` a resize always re-applies the
    breakpoint rule, even after the user picked a mode by hand; with
    ``honor_explicit=True`` an explicit choice survives resizes.
    """

    def __init__(
        self,
        breakpoint: int = 1024,
        honor_explicit: bool = False,
        default_width: int = 1280,
    ) -> None:
        self.breakpoint = breakpoint
        self.honor_explicit = honor_explicit
        self.default_width = default_width

    def initial_mode(self, viewport_width: int | None) -> ViewMode:
        """Mode for a freshly mounted view (unknown width uses ``default_width``)."""
        width = self.default_width if viewport_width is None else viewport_width
        return "table" if width >= self.breakpoint else "grid"

    def on_resize(self, viewport_width: int, state: ViewState) -> ViewMode:
        """Mode after the viewport changes to *viewport_width*."""
        if state.view_mode_is_explicit and self.honor_explicit:
            return state.view_mode
        return self.initial_mode(viewport_width)


class ViewportObserver:
    """Single source of viewport width for the views of one client.

    Views subscribe instead of reading a global width; ``resize`` fans the
    new width out to every subscriber.
    """

    def __init__(self, width: int) -> None:
        self.width = width
        self._listeners: list[ResizeListener] = []

    def subscribe(self, listener: ResizeListener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def resize(self, width: int) -> None:
        """Record the new width and notify subscribers."""
        self.width = width
        for listener in list(self._listeners):
            try:
                listener(width)
            except Exception:
                logger.exception("Resize listener raised for width %d", width)

"""Pydantic models for list view snapshots, sessions and events."""

from typing import Any, Literal

from pydantic import BaseModel, Field

from admin_console.models.view_state import ViewState

ControllerStatus = Literal["idle", "loading", "ready", "error"]

EventType = Literal[
    "search",
    "filter",
    "time_window",
    "sort",
    "toggle_sort_order",
    "page",
    "page_size",
    "view_mode",
    "resize",
    "reset_filters",
    "clear_all",
]


class ListViewSnapshot(BaseModel):
    """Everything the presentation layer needs to render one list view."""

    page_key: str
    status: ControllerStatus
    is_loading: bool
    error: str | None = None
    state: ViewState
    query: str
    rows: list[dict[str, Any]]
    total_matched: int
    server_total: int | None = None
    total_pages: int
    page_range: list[int | str]
    time_window_label: str
    show_total_banner: bool
    active_filter_count: int
    filter_options: dict[str, list[str]]
    total_sum: float | None = None
    page_size_options: list[int]


class ViewEvent(BaseModel):
    """A single user or viewport event applied to a session.

    ``key`` names the filter for ``filter`` events; ``value`` carries the
    new search text, filter value, window, sort key, page number, page
    size, view mode or viewport width depending on ``type``.
    """

    type: EventType
    key: str | None = None
    value: str | int | None = None
    sort_order: Literal["asc", "desc"] | None = None


class SessionCreate(BaseModel):
    """Request body for opening a list view session."""

    query: str = ""
    viewport_width: int | None = Field(None, ge=0)
    path_params: dict[str, str] = {}


class SessionResponse(BaseModel):
    """A session id together with the view it currently shows."""

    session_id: str
    snapshot: ListViewSnapshot

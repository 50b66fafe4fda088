"""Pydantic models for list view state and projections."""

from typing import Any, Literal, get_args

from pydantic import BaseModel, Field

TimeWindow = Literal[
    "none",
    "last24h",
    "last7d",
    "last28d",
    "thisWeek",
    "thisMonth",
    "thisYear",
    "lastYear",
    "all",
]
SortOrder = Literal["asc", "desc"]
ViewMode = Literal["grid", "table"]

TIME_WINDOWS: tuple[str, ...] = get_args(TimeWindow)
SORT_ORDERS: tuple[str, ...] = get_args(SortOrder)
VIEW_MODES: tuple[str, ...] = get_args(ViewMode)


class ViewState(BaseModel):
    """Canonical, serializable state of one list view.

    ``filters`` always carries every filter key the page declares; an
    empty string means "no constraint".  ``view_mode_is_explicit`` is set
    once the user toggles the view mode by hand, or when a link carries a
    mode other than the viewport default; an explicit mode is written to
    the URL as ``view``.
    """

    search: str = ""
    filters: dict[str, str] = {}
    time_window: TimeWindow = "none"
    sort_by: str = "createdAt"
    sort_order: SortOrder = "desc"
    page: int = Field(1, ge=1)
    page_size: int = Field(12, ge=1)
    view_mode: ViewMode = "table"
    view_mode_is_explicit: bool = False

    model_config = {"frozen": True}


class ProjectionResult(BaseModel):
    """Filtered, sorted, paginated subset of a collection."""

    rows: list[dict[str, Any]] = []
    total_matched: int = 0
    total_sum: float | None = None

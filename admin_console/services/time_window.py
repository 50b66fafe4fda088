"""Relative time-window classification for record timestamps.

Windows are evaluated against an explicit calendar convention (IANA
timezone plus first day of week) supplied at construction, so results do
not drift with the deployment host's locale.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import datetime, time, timedelta, timezone, tzinfo
from typing import Any
from zoneinfo import ZoneInfo

from admin_console.models.view_state import TIME_WINDOWS

logger = logging.getLogger(__name__)

TIME_WINDOW_LABELS: dict[str, str] = {
    "all": "All Time",
    "last24h": "Last 24 Hours",
    "last7d": "Last 7 Days",
    "last28d": "Last 28 Days",
    "thisWeek": "This Week",
    "thisMonth": "This Month",
    "thisYear": "This Year",
    "lastYear": "Last Year",
}

_ROLLING_WINDOWS: dict[str, timedelta] = {
    "last24h": timedelta(hours=24),
    "last7d": timedelta(days=7),
    "last28d": timedelta(days=28),
}

# Python weekday() numbering: Monday=0 ... Sunday=6
_WEEK_START_WEEKDAY: dict[str, int] = {"monday": 0, "sunday": 6}

_YEAR_ONLY = re.compile(r"^\d{4}$")
_EPOCH_DIGITS = re.compile(r"^-?\d+(\.\d+)?$")


def time_window_label(window: str) -> str:
    """Human-readable label for *window*; unknown windows read as "All Time"."""
    return TIME_WINDOW_LABELS.get(window, "All Time")


def normalize_time_window(window: str | None) -> str:
    """Return *window* if it is a known window name, else ``"none"``."""
    if window in TIME_WINDOWS:
        return window
    return "none"


def parse_timestamp(value: Any, tz: tzinfo = timezone.utc) -> datetime | None:
    """Parse an ISO-8601 string, epoch milliseconds, or datetime.

    A bare four-digit string is an ISO year (``"2024"`` is Jan 1st 2024);
    longer digit strings are epoch milliseconds.  Naive values are
    interpreted in *tz*.  Returns ``None`` for anything
    unparseable instead of raising.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        if not math.isfinite(value):
            return None
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if _YEAR_ONLY.match(text) and int(text) >= 1:
            return datetime(int(text), 1, 1, tzinfo=tz)
        if _EPOCH_DIGITS.match(text):
            return parse_timestamp(float(text), tz)
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz)
    return parsed


class TimeWindowClassifier:
    """Decide whether a timestamp falls inside a named relative window.

    ``none`` and ``all`` share the same predicate (always true); ``all``
    only differs as a display trigger for the total banner.
    """

    def __init__(self, tz: str | tzinfo = "UTC", week_starts_on: str = "sunday") -> None:
        self.tz: tzinfo = ZoneInfo(tz) if isinstance(tz, str) else tz
        if week_starts_on not in _WEEK_START_WEEKDAY:
            raise ValueError(
                f"Unknown week start '{week_starts_on}'. "
                f"Available: {list(_WEEK_START_WEEKDAY.keys())}"
            )
        self._week_start = _WEEK_START_WEEKDAY[week_starts_on]

    def matches(
        self,
        created_at: Any,
        window: str | None,
        now: datetime | None = None,
    ) -> bool:
        """Return whether *created_at* falls inside *window* relative to *now*."""
        window = normalize_time_window(window)
        if window in ("none", "all"):
            return True

        timestamp = parse_timestamp(created_at, self.tz)
        if timestamp is None:
            return False

        current = self._localize(now)

        if window in _ROLLING_WINDOWS:
            return current - timestamp <= _ROLLING_WINDOWS[window]

        if window == "lastYear":
            start = self._midnight(current.replace(year=current.year - 1, month=1, day=1))
            end = self._midnight(current.replace(month=1, day=1))
            return start <= timestamp < end

        return timestamp >= self.window_start(window, current)

    def window_start(self, window: str, now: datetime | None = None) -> datetime:
        """Inclusive lower bound of a calendar window (thisWeek/Month/Year)."""
        current = self._localize(now)
        if window == "thisWeek":
            days_back = (current.weekday() - self._week_start) % 7
            return self._midnight(current - timedelta(days=days_back))
        if window == "thisMonth":
            return self._midnight(current.replace(day=1))
        if window == "thisYear":
            return self._midnight(current.replace(month=1, day=1))
        raise ValueError(f"'{window}' is not a calendar window")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _localize(self, now: datetime | None) -> datetime:
        if now is None:
            return datetime.now(self.tz)
        if now.tzinfo is None:
            return now.replace(tzinfo=self.tz)
        return now.astimezone(self.tz)

    def _midnight(self, moment: datetime) -> datetime:
        return datetime.combine(moment.date(), time.min, tzinfo=self.tz)

"""Predicate and sort-key builder for in-memory record filtering.

Turns view-state filter parameters into a list of record predicates and a
sort key function.  Sort keys are validated against the page's allowlist;
an unknown key falls back to the page default instead of raising.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from admin_console.models.page import FilterDescriptor, PageConfig, SortField
from admin_console.services.time_window import TimeWindowClassifier, parse_timestamp

logger = logging.getLogger(__name__)

Record = Mapping[str, Any]
Predicate = Callable[[Record], bool]

_TRUTHY_STRINGS = {"true", "1", "yes"}


def get_field(record: Record, path: str) -> Any:
    """Read a dotted *path* (``"owner.username"``) from *record*.

    Returns ``None`` as soon as a segment is missing or not a mapping.
    """
    value: Any = record
    for part in path.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
        if value is None:
            return None
    return value


def as_text(value: Any) -> str:
    """String form used for search and equality; ``None`` becomes ``""``."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def is_truthy(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUTHY_STRINGS
    return bool(value)


def as_number(value: Any) -> float:
    """Numeric sort value; missing, invalid or non-finite values are 0."""
    if value is None or isinstance(value, bool):
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


@dataclass
class FilterResult:
    """Result of building a record filter: predicates plus ordering."""

    predicates: list[Predicate]
    sort_field: SortField
    descending: bool = True
    sort_key: Callable[[Record], Any] = field(default=lambda record: 0)

    def matches(self, record: Record) -> bool:
        """All predicates ANDed; no predicates matches everything."""
        return all(predicate(record) for predicate in self.predicates)


class RecordFilterBuilder:
    """Build record predicates and a sort key from view-state parameters.

    Usage::

        builder = RecordFilterBuilder(page, classifier)
        result = (
            builder
            .add_search(state.search)
            .add_filters(state.filters)
            .add_time_window(state.time_window, now)
            .build(sort_by=state.sort_by, sort_order=state.sort_order)
        )
    """

    def __init__(self, page: PageConfig, classifier: TimeWindowClassifier) -> None:
        self.page = page
        self.classifier = classifier
        self.predicates: list[Predicate] = []

    def add_search(self, search: str | None) -> "RecordFilterBuilder":
        """Case-folded substring match over the page's searchable fields."""
        query = (search or "").strip().casefold()
        if not query:
            return self

        fields = self.page.search_fields

        def matches_search(record: Record) -> bool:
            return any(
                query in as_text(get_field(record, path)).casefold()
                for path in fields
            )

        self.predicates.append(matches_search)
        return self

    def add_filters(self, filters: Mapping[str, str] | None) -> "RecordFilterBuilder":
        """Field-equality constraint for every non-empty filter value."""
        for key, value in (filters or {}).items():
            if not value:
                continue
            descriptor = self.page.get_filter(key)
            if descriptor is None:
                logger.warning(
                    "Ignoring filter %r not declared by page %s", key, self.page.key
                )
                continue
            self.predicates.append(self._equality_predicate(descriptor, value))
        return self

    def add_time_window(
        self, window: str | None, now: datetime | None = None
    ) -> "RecordFilterBuilder":
        """Constrain records to a relative time window; ``none``/``all`` add nothing."""
        if window in (None, "none", "all"):
            return self

        time_field = self.page.time_field
        classifier = self.classifier

        def matches_window(record: Record) -> bool:
            return classifier.matches(get_field(record, time_field), window, now)

        self.predicates.append(matches_window)
        return self

    def build_sort(self, sort_by: str | None) -> SortField:
        """Resolve *sort_by* against the page allowlist."""
        sort_field = self.page.get_sort_field(sort_by) if sort_by else None
        if sort_field is None:
            logger.warning(
                "Unknown sort key %r for page %s, using %s",
                sort_by,
                self.page.key,
                self.page.defaults.sort_by,
            )
            sort_field = self.page.get_sort_field(self.page.defaults.sort_by)
        return sort_field

    def build(
        self, sort_by: str | None = None, sort_order: str | None = None
    ) -> FilterResult:
        """Build the final FilterResult with predicates and sort key."""
        sort_field = self.build_sort(sort_by)
        direction = sort_order or self.page.defaults.sort_order
        return FilterResult(
            predicates=list(self.predicates),
            sort_field=sort_field,
            descending=direction == "desc",
            sort_key=self._sort_key(sort_field),
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _equality_predicate(self, descriptor: FilterDescriptor, value: str) -> Predicate:
        path = descriptor.record_field

        if descriptor.kind == "boolean":
            wanted = value.lower() == "true"
            return lambda record: is_truthy(get_field(record, path)) == wanted

        if descriptor.case_sensitive:
            return lambda record: as_text(get_field(record, path)) == value

        folded = value.casefold()
        return lambda record: as_text(get_field(record, path)).casefold() == folded

    def _sort_key(self, sort_field: SortField) -> Callable[[Record], Any]:
        path = sort_field.record_field

        if sort_field.kind == "number":
            return lambda record: as_number(get_field(record, path))

        if sort_field.kind == "text":
            return lambda record: as_text(get_field(record, path)).casefold()

        tz = self.classifier.tz

        def date_key(record: Record) -> float:
            timestamp = parse_timestamp(get_field(record, path), tz)
            return timestamp.timestamp() if timestamp is not None else 0.0

        return date_key

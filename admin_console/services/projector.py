"""Pure projection of a record collection into one page of rows.

Pipeline order is fixed: search, field filters, time window (all ANDed),
then a stable sort, then the page slice.  The match count is taken after
filtering and before slicing so banners show "results after filter".
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import datetime
from typing import Any

from admin_console.models.page import FilterDescriptor, PageConfig
from admin_console.models.view_state import ProjectionResult, ViewState
from admin_console.services.record_filter import (
    RecordFilterBuilder,
    as_number,
    as_text,
    get_field,
)
from admin_console.services.time_window import TimeWindowClassifier


def derive_options(
    records: Sequence[Mapping[str, Any]], descriptor: FilterDescriptor
) -> list[str]:
    """Allowed values for *descriptor*: declared, boolean, or derived from data.

    Derived values are the sorted unique non-empty field values, case-folded
    unless the filter is case sensitive.
    """
    if descriptor.kind == "boolean":
        return ["true", "false"]
    if descriptor.options is not None:
        return list(descriptor.options)

    values: set[str] = set()
    for record in records:
        text = as_text(get_field(record, descriptor.record_field))
        if not descriptor.case_sensitive:
            text = text.casefold()
        if text:
            values.add(text)
    return sorted(values)


class CollectionProjector:
    """Apply a ``ViewState`` to an in-memory collection for one page."""

    def __init__(self, page: PageConfig, classifier: TimeWindowClassifier) -> None:
        self.page = page
        self.classifier = classifier

    def project(
        self,
        records: Sequence[Mapping[str, Any]],
        state: ViewState,
        now: datetime | None = None,
        paginate: bool = True,
    ) -> ProjectionResult:
        """Filter, sort and slice *records* according to *state*.

        With ``paginate=False`` (server-paginated endpoints) the sorted,
        filtered set is returned whole.  A page past the end yields no rows
        but still reports the true match count.
        """
        result = (
            RecordFilterBuilder(self.page, self.classifier)
            .add_search(state.search)
            .add_filters(state.filters)
            .add_time_window(state.time_window, now)
            .build(sort_by=state.sort_by, sort_order=state.sort_order)
        )

        matched = [record for record in records if result.matches(record)]
        # sorted() is stable and keeps tie order with reverse=True as well
        ordered = sorted(matched, key=result.sort_key, reverse=result.descending)

        total_sum = None
        if self.page.sum_field:
            total_sum = sum(as_number(get_field(r, self.page.sum_field)) for r in ordered)

        if paginate:
            start = (state.page - 1) * state.page_size
            rows = ordered[start : start + state.page_size]
        else:
            rows = ordered

        return ProjectionResult(
            rows=[dict(row) for row in rows],
            total_matched=len(ordered),
            total_sum=total_sum,
        )

    def filter_options(
        self, records: Sequence[Mapping[str, Any]]
    ) -> dict[str, list[str]]:
        """Selectable values for every filter the page declares."""
        return {
            descriptor.key: derive_options(records, descriptor)
            for descriptor in self.page.filters
        }

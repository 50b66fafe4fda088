"""Bidirectional mapping between ``ViewState`` and a URL query string.

Decoding is total: every field has a fallback, so a hand-edited or stale
link always yields a renderable state.  Encoding omits fields that equal
their default unless the page declares them "always emit".
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping

import httpx

from admin_console.models.page import FilterDescriptor, PageConfig
from admin_console.models.view_state import SORT_ORDERS, VIEW_MODES, ViewState
from admin_console.services.time_window import normalize_time_window
from admin_console.services.viewport import ViewportModePolicy

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_int(value: str | None) -> int | None:
    """Parse the leading integer of *value* (``"12abc"`` -> 12).

    Returns ``None`` when no integer prefix exists.
    """
    if value is None:
        return None
    match = _LEADING_INT.match(value)
    if match is None:
        return None
    return int(match.group(1))


def _as_query_params(query: str | Mapping[str, str] | httpx.QueryParams | None) -> httpx.QueryParams:
    if query is None:
        return httpx.QueryParams()
    if isinstance(query, str):
        return httpx.QueryParams(query.lstrip("?"))
    return httpx.QueryParams(query)


class QueryStateCodec:
    """Encode and decode the view state of one page."""

    def __init__(
        self,
        page: PageConfig,
        viewport_policy: ViewportModePolicy,
        max_page_size: int | None = None,
    ) -> None:
        self.page = page
        self.viewport_policy = viewport_policy
        self.max_page_size = max_page_size

    # ------------------------------------------------------------------
    # Decode
    # ------------------------------------------------------------------

    def decode(
        self,
        query: str | Mapping[str, str] | httpx.QueryParams | None,
        viewport_width: int | None = None,
    ) -> ViewState:
        """Build a ``ViewState`` from *query*, defaulting every bad field."""
        params = _as_query_params(query)
        keys = self.page.url_keys
        defaults = self.page.defaults

        filters = {
            descriptor.key: self._decode_filter(descriptor, params.get(descriptor.key, ""))
            for descriptor in self.page.filters
        }

        raw_time = params.get(keys.time) or "none"
        time_window = normalize_time_window(raw_time)
        if time_window != raw_time:
            logger.debug("Ignoring unknown time window %r on page %s", raw_time, self.page.key)

        sort_by = params.get(keys.sort_by) or defaults.sort_by
        if sort_by not in self.page.sortable_keys:
            logger.debug("Ignoring unknown sort key %r on page %s", sort_by, self.page.key)
            sort_by = defaults.sort_by

        sort_order = params.get(keys.sort_order) or defaults.sort_order
        if sort_order not in SORT_ORDERS:
            sort_order = defaults.sort_order

        page = parse_int(params.get(keys.page))
        if page is None or page < 1:
            page = 1

        default_size = self._clamp_page_size(defaults.page_size)
        page_size = parse_int(params.get(keys.page_size))
        if page_size is None or page_size < 1:
            page_size = default_size
        page_size = self._clamp_page_size(page_size)

        # A URL mode that overrides the viewport default counts as a user choice
        default_mode = self.viewport_policy.initial_mode(viewport_width)
        view_mode = params.get(keys.view)
        if view_mode not in VIEW_MODES:
            view_mode = default_mode

        return ViewState(
            search=params.get(keys.search, ""),
            filters=filters,
            time_window=time_window,
            sort_by=sort_by,
            sort_order=sort_order,
            page=page,
            page_size=page_size,
            view_mode=view_mode,
            view_mode_is_explicit=view_mode != default_mode,
        )

    def normalize_filter(self, key: str, value: str | None) -> str | None:
        """Canonical value for filter *key*, or ``None`` if the key is unknown."""
        descriptor = self.page.get_filter(key)
        if descriptor is None:
            return None
        return self._decode_filter(descriptor, value or "")

    def _decode_filter(self, descriptor: FilterDescriptor, value: str) -> str:
        if not value:
            return ""

        if descriptor.kind == "boolean":
            lowered = value.lower()
            if lowered in ("true", "false"):
                return lowered
            logger.debug("Dropping non-boolean value %r for filter %s", value, descriptor.key)
            return ""

        if descriptor.options is None:
            return value if descriptor.case_sensitive else value.casefold()

        for option in descriptor.options:
            if option == value:
                return option
            if not descriptor.case_sensitive and option.casefold() == value.casefold():
                return option
        logger.debug("Dropping unknown value %r for filter %s", value, descriptor.key)
        return ""

    def _clamp_page_size(self, page_size: int) -> int:
        if self.max_page_size is not None and page_size > self.max_page_size:
            return self.max_page_size
        return page_size

    # ------------------------------------------------------------------
    # Encode
    # ------------------------------------------------------------------

    def encode(self, state: ViewState) -> str:
        """Serialize *state*, omitting defaults the page does not always emit."""
        keys = self.page.url_keys
        defaults = self.page.defaults
        emit = self.page.always_emit
        pairs: list[tuple[str, str]] = []

        if state.search or "search" in emit:
            pairs.append((keys.search, state.search))

        time_value = "" if state.time_window == "none" else state.time_window
        if time_value or "time" in emit:
            pairs.append((keys.time, time_value))

        for descriptor in self.page.filters:
            value = state.filters.get(descriptor.key, "")
            if value or "filters" in emit:
                pairs.append((descriptor.key, value))

        if state.sort_by != defaults.sort_by or "sort_by" in emit:
            pairs.append((keys.sort_by, state.sort_by))
        if state.sort_order != defaults.sort_order or "sort_order" in emit:
            pairs.append((keys.sort_order, state.sort_order))

        if state.page != 1 or "page" in emit:
            pairs.append((keys.page, str(state.page)))
        if state.page_size != defaults.page_size or "page_size" in emit:
            pairs.append((keys.page_size, str(state.page_size)))

        if state.view_mode_is_explicit or "view" in emit:
            pairs.append((keys.view, state.view_mode))

        return str(httpx.QueryParams(pairs))

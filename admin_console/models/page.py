"""Pydantic models for list page declarations.

A ``PageConfig`` is constructed once per page and never mutated.  It names
the record fields a list page searches, filters and sorts on, the URL keys
it uses, and the backend endpoint it reads from.
"""

from __future__ import annotations

import string
from typing import Literal

from pydantic import BaseModel, Field, model_validator

from admin_console.models.view_state import SortOrder

# Field names a page may declare as "always emit" in its URL
EMITTABLE_FIELDS: frozenset[str] = frozenset(
    {"search", "filters", "time", "sort_by", "sort_order", "page", "page_size", "view"}
)


class FilterDescriptor(BaseModel):
    """One field-equality filter offered by a list page.

    ``options=None`` means the allowed values are derived from the loaded
    collection.  Boolean filters accept only ``"true"`` and ``"false"``.
    """

    key: str
    label: str
    field: str | None = None
    kind: Literal["text", "boolean"] = "text"
    options: tuple[str, ...] | None = None
    case_sensitive: bool = False

    model_config = {"frozen": True}

    @property
    def record_field(self) -> str:
        """Dotted record path this filter reads (defaults to the key)."""
        return self.field or self.key


class SortField(BaseModel):
    """A sortable column and the comparator family used for it."""

    key: str
    label: str
    kind: Literal["date", "number", "text"] = "date"
    field: str | None = None

    model_config = {"frozen": True}

    @property
    def record_field(self) -> str:
        return self.field or self.key


class UrlKeys(BaseModel):
    """Query-string key names; pages differ mostly on the time key."""

    search: str = "search"
    page: str = "page"
    page_size: str = "pageSize"
    view: str = "view"
    time: str = "time"
    sort_by: str = "sortBy"
    sort_order: str = "sortOrder"

    model_config = {"frozen": True}


class PageDefaults(BaseModel):
    """Fallback values used when a URL omits or garbles a field."""

    page_size: int = Field(12, ge=1)
    sort_by: str = "createdAt"
    sort_order: SortOrder = "desc"

    model_config = {"frozen": True}


class PageConfig(BaseModel):
    """Declaration of one list page."""

    key: str
    title: str
    endpoint: str
    search_fields: tuple[str, ...] = ()
    filters: tuple[FilterDescriptor, ...] = ()
    sort_fields: tuple[SortField, ...] = (
        SortField(key="createdAt", label="Date", kind="date"),
    )
    defaults: PageDefaults = PageDefaults()
    url_keys: UrlKeys = UrlKeys()
    always_emit: frozenset[str] = frozenset()
    time_field: str = "createdAt"
    sum_field: str | None = None
    server_paginated: bool = False
    fetch_error_message: str | None = None

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_declaration(self) -> "PageConfig":
        sort_keys = [s.key for s in self.sort_fields]
        if not sort_keys:
            raise ValueError(f"Page '{self.key}' declares no sortable fields")
        if self.defaults.sort_by not in sort_keys:
            raise ValueError(
                f"Page '{self.key}' default sort '{self.defaults.sort_by}' "
                f"is not one of {sort_keys}"
            )

        filter_keys = [f.key for f in self.filters]
        if len(set(filter_keys)) != len(filter_keys):
            raise ValueError(f"Page '{self.key}' declares duplicate filter keys")
        reserved = set(self.url_keys.model_dump().values())
        clashing = reserved.intersection(filter_keys)
        if clashing:
            raise ValueError(
                f"Page '{self.key}' filter keys clash with URL keys: {sorted(clashing)}"
            )

        unknown = set(self.always_emit) - EMITTABLE_FIELDS
        if unknown:
            raise ValueError(
                f"Page '{self.key}' cannot always emit {sorted(unknown)}"
            )
        return self

    # ------------------------------------------------------------------
    # Lookup helpers
    # ------------------------------------------------------------------

    @property
    def sortable_keys(self) -> tuple[str, ...]:
        return tuple(s.key for s in self.sort_fields)

    def get_sort_field(self, key: str) -> SortField | None:
        """Return the sort declaration for *key*, or ``None``."""
        for sort_field in self.sort_fields:
            if sort_field.key == key:
                return sort_field
        return None

    def get_filter(self, key: str) -> FilterDescriptor | None:
        """Return the filter declaration for *key*, or ``None``."""
        for descriptor in self.filters:
            if descriptor.key == key:
                return descriptor
        return None

    @property
    def path_param_names(self) -> tuple[str, ...]:
        """Placeholder names in the endpoint template, in order."""
        return tuple(
            name for _, name, _, _ in string.Formatter().parse(self.endpoint) if name
        )

    def format_endpoint(self, path_params: dict[str, str] | None = None) -> str:
        """Fill ``{placeholders}`` in the endpoint template.

        Raises KeyError when a placeholder has no value.
        """
        return self.endpoint.format(**(path_params or {}))


class PageSummary(BaseModel):
    """Page declaration as returned by ``GET /pages``."""

    key: str
    title: str
    endpoint: str
    filters: list[FilterDescriptor]
    sort_fields: list[SortField]
    default_page_size: int
    time_key: str
    server_paginated: bool

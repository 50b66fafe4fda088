"""Tests for page declarations and the page registry."""

from __future__ import annotations

import logging

import pytest

from admin_console.models.page import (
    FilterDescriptor,
    PageConfig,
    PageDefaults,
    SortField,
)
from admin_console.pages.catalog import BUILTIN_PAGES, GROUPS, ORDERS, TRANSACTIONS
from admin_console.pages.registry import PageRegistry


class TestPageConfig:
    def test_default_sort_must_be_declared(self) -> None:
        with pytest.raises(ValueError, match="default sort"):
            PageConfig(
                key="broken",
                title="Broken",
                endpoint="/broken",
                defaults=PageDefaults(sort_by="name"),
            )

    def test_duplicate_filter_keys_are_rejected(self) -> None:
        status = FilterDescriptor(key="status", label="Status")
        with pytest.raises(ValueError, match="duplicate filter"):
            PageConfig(key="broken", title="Broken", endpoint="/broken", filters=(status, status))

    def test_filter_keys_cannot_shadow_url_keys(self) -> None:
        with pytest.raises(ValueError, match="clash"):
            PageConfig(
                key="broken",
                title="Broken",
                endpoint="/broken",
                filters=(FilterDescriptor(key="page", label="Page"),),
            )

    def test_always_emit_names_view_state_fields(self) -> None:
        with pytest.raises(ValueError, match="always emit"):
            PageConfig(
                key="broken",
                title="Broken",
                endpoint="/broken",
                always_emit=frozenset({"password"}),
            )

    def test_endpoint_placeholders(self) -> None:
        assert GROUPS.path_param_names == ("collegeslug",)
        assert ORDERS.path_param_names == ()
        assert GROUPS.format_endpoint({"collegeslug": "iitb"}) == "/group/all/iitb"
        with pytest.raises(KeyError):
            GROUPS.format_endpoint()

    def test_sort_field_record_path(self) -> None:
        amount = TRANSACTIONS.get_sort_field("amount")
        assert amount is not None
        assert amount.record_field == "points"
        assert SortField(key="createdAt", label="Date").record_field == "createdAt"
        assert TRANSACTIONS.get_sort_field("password") is None


class TestBuiltinPages:
    def test_keys_are_unique(self) -> None:
        keys = [page.key for page in BUILTIN_PAGES]
        assert len(keys) == len(set(keys))

    def test_financial_pages_use_time_filter_key(self) -> None:
        for page in (ORDERS, TRANSACTIONS):
            assert page.url_keys.time == "timeFilter"
            assert page.sum_field is not None
        assert GROUPS.url_keys.time == "time"


class TestPageRegistry:
    def test_register_and_lookup(self) -> None:
        registry = PageRegistry(BUILTIN_PAGES)

        assert registry.get_page("groups") is GROUPS
        assert registry.get_page("missing") is None
        assert [page.key for page in registry.list_pages()] == [page.key for page in BUILTIN_PAGES]

    def test_replacing_a_page_warns(self, caplog) -> None:
        registry = PageRegistry([GROUPS])
        renamed = GROUPS.model_copy(update={"title": "Clubs"})

        with caplog.at_level(logging.WARNING):
            registry.register_page(renamed)

        assert registry.get_page("groups").title == "Clubs"
        assert len(registry.list_pages()) == 1
        assert "Replacing" in caplog.text

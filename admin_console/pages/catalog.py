"""Built-in list page declarations for the campus admin console.

Each page differs only in the record fields it searches, filters and sorts
on, its URL key conventions and its backend endpoint.
"""

from __future__ import annotations

from admin_console.models.page import (
    EMITTABLE_FIELDS,
    FilterDescriptor,
    PageConfig,
    PageDefaults,
    SortField,
    UrlKeys,
)

SUBMISSION_STATUSES = ("pending", "approved", "rejected")

_CREATED_AT = SortField(key="createdAt", label="Date", kind="date")
_CLICK_COUNTS = SortField(key="clickCounts", label="Clicks", kind="number")

_SUBMISSION_STATUS = FilterDescriptor(
    key="submissionStatus",
    label="Status",
    options=SUBMISSION_STATUSES,
    case_sensitive=True,
)
_DELETED = FilterDescriptor(key="deleted", label="Deleted", kind="boolean")

# Financial pages emit their whole state for shareable links
_FINANCIAL_URL_KEYS = UrlKeys(time="timeFilter")


GROUPS = PageConfig(
    key="groups",
    title="Groups",
    endpoint="/group/all/{collegeslug}",
    search_fields=("title", "info", "domain"),
    filters=(_SUBMISSION_STATUS, _DELETED),
    sort_fields=(_CREATED_AT, _CLICK_COUNTS),
)

LOST_FOUND = PageConfig(
    key="lost-found",
    title="Lost & Found",
    endpoint="/lostandfound/all/{collegeslug}",
    search_fields=("title", "description", "location", "owner.username"),
    filters=(
        _SUBMISSION_STATUS,
        _DELETED,
        FilterDescriptor(key="type", label="Type", case_sensitive=True),
        FilterDescriptor(key="currentStatus", label="Current status", case_sensitive=True),
    ),
    sort_fields=(_CREATED_AT, _CLICK_COUNTS),
    fetch_error_message="Failed to fetch lost and found items",
)

PRODUCTS = PageConfig(
    key="products",
    title="Products",
    endpoint="/store/all/{collegeslug}",
    search_fields=("name", "description"),
    filters=(
        _SUBMISSION_STATUS,
        FilterDescriptor(key="available", label="Availability", kind="boolean"),
        _DELETED,
    ),
    sort_fields=(_CREATED_AT, _CLICK_COUNTS),
)

SENIORS = PageConfig(
    key="seniors",
    title="Seniors",
    endpoint="/senior/all/{collegeslug}",
    search_fields=("name", "currentPosition", "branch.branchCode"),
    filters=(_SUBMISSION_STATUS, _DELETED),
    sort_fields=(_CREATED_AT, _CLICK_COUNTS),
)

ORDERS = PageConfig(
    key="orders",
    title="Orders",
    endpoint="/order",
    search_fields=("user.email", "user.username", "user.name", "_id"),
    filters=(
        FilterDescriptor(key="status", label="Status"),
        FilterDescriptor(key="orderType", label="Order type", case_sensitive=True),
        FilterDescriptor(key="paymentMethod", label="Payment method", case_sensitive=True),
    ),
    sort_fields=(
        _CREATED_AT,
        SortField(key="amount", label="Amount", kind="number"),
    ),
    url_keys=_FINANCIAL_URL_KEYS,
    always_emit=EMITTABLE_FIELDS,
    sum_field="amount",
)

TRANSACTIONS = PageConfig(
    key="transactions",
    title="Transactions",
    endpoint="/transactions/all",
    search_fields=("user.email", "user.username", "user.name"),
    filters=(
        FilterDescriptor(key="type", label="Type"),
        FilterDescriptor(key="resourceType", label="Resource type"),
    ),
    sort_fields=(
        _CREATED_AT,
        SortField(key="amount", label="Points", kind="number", field="points"),
    ),
    url_keys=_FINANCIAL_URL_KEYS,
    always_emit=EMITTABLE_FIELDS,
    sum_field="points",
)

DASHBOARD_USERS = PageConfig(
    key="dashboard-users",
    title="Dashboard Users",
    endpoint="/user/dashboard-users",
    search_fields=("email", "username", "name", "role"),
    filters=(FilterDescriptor(key="role", label="Role"),),
    fetch_error_message="Failed to load dashboard users",
)

NOTIFICATIONS = PageConfig(
    key="notifications",
    title="Notifications",
    endpoint="/notification",
    search_fields=("title", "body"),
    defaults=PageDefaults(page_size=10),
    server_paginated=True,
    fetch_error_message="Failed to fetch notification history",
)

BUILTIN_PAGES: tuple[PageConfig, ...] = (
    GROUPS,
    LOST_FOUND,
    PRODUCTS,
    SENIORS,
    ORDERS,
    TRANSACTIONS,
    DASHBOARD_USERS,
    NOTIFICATIONS,
)

"""Async client for the campus-services REST backend.

The backend answers collection endpoints with ``{"data": [...]}``; paginated
endpoints add ``{"pagination": {"total": ..., "pages": ...}}``.  Every
transport, status or payload problem is raised as ``FetchFailure`` so the
list view has exactly one error type to surface.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

import httpx

from admin_console.models.page import PageConfig

logger = logging.getLogger(__name__)


class FetchFailure(Exception):
    """The collection could not be retrieved.

    ``message`` is the backend's own error text when it sent one, else
    ``None`` so callers can substitute a page-specific message.
    """

    def __init__(self, message: str | None = None, status_code: int | None = None) -> None:
        super().__init__(message or "Failed to fetch collection")
        self.message = message
        self.status_code = status_code


@dataclass
class FetchedCollection:
    """Records returned by one fetch, with server pagination when present."""

    records: list[dict[str, Any]]
    total: int | None = None
    pages: int | None = None


class CollectionSource(Protocol):
    async def fetch(
        self,
        page: PageConfig,
        *,
        path_params: dict[str, str] | None = None,
        page_number: int = 1,
        page_size: int = 10,
    ) -> FetchedCollection: ...


def _error_message(response: httpx.Response) -> str | None:
    """Extract ``message`` (or ``error``) from a JSON error body."""
    try:
        body = response.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        for key in ("message", "error"):
            value = body.get(key)
            if isinstance(value, str) and value:
                return value
    return None


def _as_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class BackendClient:
    """Thin wrapper over a shared ``httpx.AsyncClient``."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self.client = client

    async def fetch(
        self,
        page: PageConfig,
        *,
        path_params: dict[str, str] | None = None,
        page_number: int = 1,
        page_size: int = 10,
    ) -> FetchedCollection:
        """Fetch the collection behind *page*.

        Server-paginated pages are requested with ``page``/``limit`` query
        parameters; all other pages fetch the full collection.
        """
        try:
            endpoint = page.format_endpoint(path_params)
        except KeyError as exc:
            raise FetchFailure(f"Missing path parameter {exc.args[0]!r}") from exc

        params = None
        if page.server_paginated:
            params = {"page": page_number, "limit": page_size}
        return await self.fetch_collection(endpoint, params=params)

    async def fetch_collection(
        self, endpoint: str, params: dict[str, Any] | None = None
    ) -> FetchedCollection:
        """GET *endpoint* and unwrap the ``data`` array."""
        try:
            response = await self.client.get(endpoint, params=params)
        except httpx.HTTPError as exc:
            logger.warning("Request to %s failed: %s", endpoint, exc)
            raise FetchFailure() from exc

        if response.is_error:
            logger.warning(
                "Backend returned %d for %s", response.status_code, endpoint
            )
            raise FetchFailure(_error_message(response), response.status_code)

        try:
            payload = response.json()
        except ValueError as exc:
            raise FetchFailure("Malformed response from backend") from exc

        data = payload.get("data") if isinstance(payload, dict) else None
        if data is None:
            data = []
        if not isinstance(data, list):
            raise FetchFailure("Malformed response from backend")

        records = [record for record in data if isinstance(record, dict)]
        pagination = payload.get("pagination") or {}
        if not isinstance(pagination, dict):
            pagination = {}

        return FetchedCollection(
            records=records,
            total=_as_int(pagination.get("total")),
            pages=_as_int(pagination.get("pages")),
        )

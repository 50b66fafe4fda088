"""Shared pytest fixtures for campus admin console tests."""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx
import pytest
from fastapi import FastAPI

from admin_console.config import Settings
from admin_console.pages.catalog import BUILTIN_PAGES
from admin_console.pages.registry import PageRegistry
from admin_console.repositories.backend_client import BackendClient
from admin_console.routers import pages, sessions
from admin_console.services.session_store import ListViewFactory, SessionStore

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


def iso(moment: datetime) -> str:
    """Backend-style ISO timestamp (``...Z``)."""
    return moment.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def make_records(count: int, **overrides: Any) -> list[dict[str, Any]]:
    """*count* records created one hour apart, newest last."""
    start = NOW - timedelta(hours=count)
    records = []
    for index in range(count):
        record = {
            "_id": f"rec-{index:03d}",
            "title": f"Record {index}",
            "createdAt": iso(start + timedelta(hours=index)),
            "clickCounts": index % 5,
            "submissionStatus": "pending",
            "deleted": False,
        }
        record.update(overrides)
        records.append(record)
    return records


class FakeBackend:
    """In-process stand-in for the campus-services REST backend.

    Collections are keyed by request path.  Paths listed in ``failures``
    answer with the given status and JSON body instead.
    """

    def __init__(self) -> None:
        self.collections: dict[str, list[dict[str, Any]]] = {}
        self.failures: dict[str, tuple[int, dict[str, Any]]] = {}
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if path in self.failures:
            status_code, body = self.failures[path]
            return httpx.Response(status_code, json=body)
        if path not in self.collections:
            return httpx.Response(404, json={"message": "Not found"})

        data = self.collections[path]
        page = request.url.params.get("page")
        if page is None:
            return httpx.Response(200, json={"success": True, "data": data})

        limit = int(request.url.params.get("limit", "10"))
        start = (int(page) - 1) * limit
        return httpx.Response(
            200,
            json={
                "success": True,
                "data": data[start : start + limit],
                "pagination": {
                    "total": len(data),
                    "pages": max(1, math.ceil(len(data) / limit)),
                },
            },
        )

    def calls_to(self, path: str) -> int:
        return sum(1 for request in self.requests if request.url.path == path)


@pytest.fixture()
def settings() -> Settings:
    """Settings pinned to UTC and a Sunday week start."""
    return Settings(
        backend_url="http://backend.test/api",
        timezone="UTC",
        week_starts_on="sunday",
        _env_file=None,
    )


@pytest.fixture()
def fake_backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture()
async def backend_client(fake_backend: FakeBackend) -> BackendClient:
    """BackendClient talking to the fake backend through a mock transport."""
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(fake_backend.handler),
        base_url="http://backend.test",
    ) as client:
        yield BackendClient(client)


@pytest.fixture()
def list_view_factory(backend_client: BackendClient, settings: Settings) -> ListViewFactory:
    return ListViewFactory(source=backend_client, settings=settings, clock=lambda: NOW)


@pytest.fixture()
async def app_client(
    list_view_factory: ListViewFactory, settings: Settings
) -> httpx.AsyncClient:
    """Create a FastAPI test app wired to the fake backend and yield a client."""
    test_app = FastAPI()

    test_app.state.page_registry = PageRegistry(BUILTIN_PAGES)
    test_app.state.list_view_factory = list_view_factory
    test_app.state.session_store = SessionStore(
        list_view_factory, max_sessions=settings.max_sessions
    )

    test_app.include_router(pages.router)
    test_app.include_router(sessions.pages_router)
    test_app.include_router(sessions.router)

    @test_app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "ok"}

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=test_app),
        base_url="http://testserver",
    ) as client:
        yield client

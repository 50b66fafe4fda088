"""Tests for the list view sessions API."""

from __future__ import annotations

import httpx
import pytest

from admin_console.pages.catalog import GROUPS
from admin_console.services.session_store import (
    ListViewFactory,
    SessionLimitError,
    SessionStore,
)
from conftest import FakeBackend, make_records

GROUPS_PATH = "/group/all/iitb"


async def open_groups_session(
    client: httpx.AsyncClient, query: str = "", viewport_width: int | None = 1280
) -> dict:
    resp = await client.post(
        "/pages/groups/sessions",
        json={
            "query": query,
            "viewport_width": viewport_width,
            "path_params": {"collegeslug": "iitb"},
        },
    )
    assert resp.status_code == 201
    return resp.json()


async def send_event(client: httpx.AsyncClient, session_id: str, **event) -> httpx.Response:
    return await client.post(f"/sessions/{session_id}/events", json=event)


# ------------------------------------------------------------------
# Session lifecycle
# ------------------------------------------------------------------


async def test_open_session(app_client: httpx.AsyncClient, fake_backend: FakeBackend) -> None:
    fake_backend.collections[GROUPS_PATH] = make_records(25)

    body = await open_groups_session(app_client, query="?sortBy=clickCounts")

    assert body["session_id"]
    snapshot = body["snapshot"]
    assert snapshot["status"] == "ready"
    assert snapshot["state"]["sort_by"] == "clickCounts"
    assert snapshot["query"] == "sortBy=clickCounts"
    assert snapshot["page_range"] == [1, 2, 3]


async def test_get_and_close_session(
    app_client: httpx.AsyncClient, fake_backend: FakeBackend
) -> None:
    fake_backend.collections[GROUPS_PATH] = make_records(3)
    session_id = (await open_groups_session(app_client))["session_id"]

    resp = await app_client.get(f"/sessions/{session_id}")
    assert resp.status_code == 200
    assert resp.json()["snapshot"]["total_matched"] == 3

    resp = await app_client.delete(f"/sessions/{session_id}")
    assert resp.status_code == 204

    assert (await app_client.get(f"/sessions/{session_id}")).status_code == 404
    assert (await app_client.delete(f"/sessions/{session_id}")).status_code == 404


async def test_open_session_for_unknown_page(app_client: httpx.AsyncClient) -> None:
    resp = await app_client.post("/pages/nope/sessions", json={})
    assert resp.status_code == 404


async def test_refresh_picks_up_backend_changes(
    app_client: httpx.AsyncClient, fake_backend: FakeBackend
) -> None:
    fake_backend.collections[GROUPS_PATH] = make_records(3)
    session_id = (await open_groups_session(app_client))["session_id"]

    fake_backend.collections[GROUPS_PATH] = make_records(2)
    resp = await app_client.post(f"/sessions/{session_id}/refresh")

    assert resp.status_code == 200
    assert resp.json()["snapshot"]["total_matched"] == 2
    assert fake_backend.calls_to(GROUPS_PATH) == 2


# ------------------------------------------------------------------
# Events
# ------------------------------------------------------------------


async def test_search_event_resets_page(
    app_client: httpx.AsyncClient, fake_backend: FakeBackend
) -> None:
    fake_backend.collections[GROUPS_PATH] = make_records(30)
    session_id = (await open_groups_session(app_client, query="page=3"))["session_id"]

    resp = await send_event(app_client, session_id, type="search", value="record 1")

    snapshot = resp.json()["snapshot"]
    assert snapshot["state"]["page"] == 1
    assert snapshot["total_matched"] == 11
    assert snapshot["query"] == "search=record+1"


async def test_filter_and_sort_events(
    app_client: httpx.AsyncClient, fake_backend: FakeBackend
) -> None:
    records = make_records(6)
    records[1]["submissionStatus"] = "approved"
    records[4]["submissionStatus"] = "approved"
    fake_backend.collections[GROUPS_PATH] = records
    session_id = (await open_groups_session(app_client))["session_id"]

    await send_event(app_client, session_id, type="filter", key="submissionStatus", value="approved")
    resp = await send_event(
        app_client, session_id, type="sort", value="createdAt", sort_order="asc"
    )

    snapshot = resp.json()["snapshot"]
    assert [row["_id"] for row in snapshot["rows"]] == ["rec-001", "rec-004"]
    assert snapshot["active_filter_count"] == 1
    assert snapshot["query"] == "submissionStatus=approved&sortOrder=asc"


async def test_page_events(app_client: httpx.AsyncClient, fake_backend: FakeBackend) -> None:
    fake_backend.collections[GROUPS_PATH] = make_records(30)
    session_id = (await open_groups_session(app_client))["session_id"]

    resp = await send_event(app_client, session_id, type="page", value=99)
    assert resp.json()["snapshot"]["state"]["page"] == 3

    resp = await send_event(app_client, session_id, type="page_size", value="20")
    state = resp.json()["snapshot"]["state"]
    assert (state["page"], state["page_size"]) == (1, 20)


async def test_resize_and_view_mode_events(
    app_client: httpx.AsyncClient, fake_backend: FakeBackend
) -> None:
    fake_backend.collections[GROUPS_PATH] = make_records(3)
    session_id = (await open_groups_session(app_client, query="search=record"))["session_id"]

    resp = await send_event(app_client, session_id, type="resize", value=600)
    snapshot = resp.json()["snapshot"]
    assert snapshot["state"]["view_mode"] == "grid"
    assert snapshot["state"]["search"] == "record"

    resp = await send_event(app_client, session_id, type="view_mode", value="table")
    snapshot = resp.json()["snapshot"]
    assert snapshot["state"]["view_mode"] == "table"
    assert snapshot["state"]["view_mode_is_explicit"] is True
    assert snapshot["query"] == "search=record&view=table"


async def test_reset_and_clear_events(
    app_client: httpx.AsyncClient, fake_backend: FakeBackend
) -> None:
    fake_backend.collections[GROUPS_PATH] = make_records(3)
    session_id = (
        await open_groups_session(app_client, query="search=x&deleted=true&time=last7d")
    )["session_id"]

    resp = await send_event(app_client, session_id, type="reset_filters")
    state = resp.json()["snapshot"]["state"]
    assert state["filters"]["deleted"] == ""
    assert state["search"] == "x"

    resp = await send_event(app_client, session_id, type="clear_all")
    state = resp.json()["snapshot"]["state"]
    assert (state["search"], state["time_window"]) == ("", "none")


@pytest.mark.parametrize(
    ("event", "status_code"),
    [
        ({"type": "filter", "value": "approved"}, 400),
        ({"type": "page", "value": "next"}, 400),
        ({"type": "resize"}, 400),
        ({"type": "teleport"}, 422),
    ],
)
async def test_invalid_events(
    app_client: httpx.AsyncClient,
    fake_backend: FakeBackend,
    event: dict,
    status_code: int,
) -> None:
    fake_backend.collections[GROUPS_PATH] = make_records(3)
    session_id = (await open_groups_session(app_client))["session_id"]

    resp = await send_event(app_client, session_id, **event)

    assert resp.status_code == status_code


async def test_event_for_unknown_session(app_client: httpx.AsyncClient) -> None:
    resp = await send_event(app_client, "missing", type="search", value="x")
    assert resp.status_code == 404


# ------------------------------------------------------------------
# Store
# ------------------------------------------------------------------


class TestSessionStore:
    async def test_limit_is_enforced(self, list_view_factory: ListViewFactory) -> None:
        store = SessionStore(list_view_factory, max_sessions=1)
        store.open(GROUPS, path_params={"collegeslug": "iitb"})

        with pytest.raises(SessionLimitError):
            store.open(GROUPS, path_params={"collegeslug": "iitb"})

    async def test_close_all_disposes_controllers(self, list_view_factory: ListViewFactory) -> None:
        store = SessionStore(list_view_factory)
        sessions = [store.open(GROUPS) for _ in range(3)]

        store.close_all()

        assert len(store) == 0
        assert all(session.controller.is_disposed for session in sessions)

    async def test_factory_applies_settings(self, list_view_factory: ListViewFactory) -> None:
        controller, viewport, history = list_view_factory.open(GROUPS, query="?page=2")

        assert viewport.width == 1280
        assert history.current == "page=2"
        assert controller.max_page_size == 100
        assert controller.policy.breakpoint == 1024

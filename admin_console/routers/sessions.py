"""List view sessions API router.

Endpoints:
- POST   /pages/{page_key}/sessions      -- open and mount a list view
- GET    /sessions/{session_id}          -- current snapshot
- POST   /sessions/{session_id}/events   -- apply a user or viewport event
- POST   /sessions/{session_id}/refresh  -- refetch the collection
- DELETE /sessions/{session_id}          -- dispose the list view
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Response

from admin_console.dependencies import get_page, get_session_store
from admin_console.models.list_view import SessionCreate, SessionResponse, ViewEvent
from admin_console.models.page import PageConfig
from admin_console.services.query_codec import parse_int
from admin_console.services.session_store import ListSession, SessionLimitError, SessionStore

logger = logging.getLogger(__name__)

pages_router = APIRouter(prefix="/pages", tags=["sessions"])
router = APIRouter(prefix="/sessions", tags=["sessions"])


def _get_session(session_id: str, store: SessionStore) -> ListSession:
    session = store.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


def _response(session: ListSession) -> SessionResponse:
    return SessionResponse(
        session_id=session.session_id,
        snapshot=session.controller.snapshot(),
    )


def _int_value(event: ViewEvent) -> int:
    value = parse_int(str(event.value)) if event.value is not None else None
    if value is None:
        raise HTTPException(
            status_code=400,
            detail=f"Event '{event.type}' requires an integer value",
        )
    return value


def _apply_event(session: ListSession, event: ViewEvent) -> None:
    """Dispatch *event* to the matching controller transition."""
    controller = session.controller
    text = "" if event.value is None else str(event.value)

    if event.type == "search":
        controller.set_search(text)
    elif event.type == "filter":
        if not event.key:
            raise HTTPException(status_code=400, detail="Filter events require a key")
        controller.set_filter(event.key, text)
    elif event.type == "time_window":
        controller.set_time_window(text)
    elif event.type == "sort":
        controller.set_sort(text, event.sort_order)
    elif event.type == "toggle_sort_order":
        controller.toggle_sort_order()
    elif event.type == "page":
        controller.set_page(_int_value(event))
    elif event.type == "page_size":
        controller.set_page_size(_int_value(event))
    elif event.type == "view_mode":
        controller.set_view_mode(text)
    elif event.type == "resize":
        session.viewport.resize(_int_value(event))
    elif event.type == "reset_filters":
        controller.reset_filters()
    elif event.type == "clear_all":
        controller.clear_all()


@pages_router.post(
    "/{page_key}/sessions", response_model=SessionResponse, status_code=201
)
async def open_session(
    request: SessionCreate,
    page: PageConfig = Depends(get_page),
    store: SessionStore = Depends(get_session_store),
) -> SessionResponse:
    """Open a list view session and load its collection."""
    try:
        session = store.open(
            page,
            query=request.query,
            viewport_width=request.viewport_width,
            path_params=request.path_params,
        )
    except SessionLimitError as exc:
        raise HTTPException(status_code=429, detail=str(exc)) from exc

    await session.controller.mount()
    return _response(session)


@router.get("/{session_id}", response_model=SessionResponse)
def get_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
) -> SessionResponse:
    """Return the current snapshot of a session."""
    return _response(_get_session(session_id, store))


@router.post("/{session_id}/events", response_model=SessionResponse)
async def post_event(
    session_id: str,
    event: ViewEvent,
    store: SessionStore = Depends(get_session_store),
) -> SessionResponse:
    """Apply one event and return the resulting snapshot."""
    session = _get_session(session_id, store)
    _apply_event(session, event)
    # Server-paginated pages refetch on page changes
    await session.controller.settle()
    return _response(session)


@router.post("/{session_id}/refresh", response_model=SessionResponse)
async def refresh_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
) -> SessionResponse:
    """Refetch the collection, e.g. after a record was edited or deleted."""
    session = _get_session(session_id, store)
    await session.controller.refresh()
    return _response(session)


@router.delete("/{session_id}", status_code=204)
def close_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
) -> Response:
    """Dispose a session."""
    if not store.close(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return Response(status_code=204)

"""List pages API router.

Endpoints:
- GET /pages                    -- declarations of every list page
- GET /pages/{page_key}/view    -- one-shot snapshot for a view query string
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from admin_console.dependencies import get_list_view_factory, get_page, get_page_registry
from admin_console.models.list_view import ListViewSnapshot
from admin_console.models.page import PageConfig, PageSummary
from admin_console.pages.registry import PageRegistry
from admin_console.services.query_codec import parse_int
from admin_console.services.session_store import ListViewFactory

router = APIRouter(prefix="/pages", tags=["pages"])

VIEWPORT_WIDTH_PARAM = "viewport_width"


@router.get("", response_model=list[PageSummary])
def list_pages(
    registry: PageRegistry = Depends(get_page_registry),
) -> list[PageSummary]:
    """Return the declaration of every registered list page."""
    return [
        PageSummary(
            key=page.key,
            title=page.title,
            endpoint=page.endpoint,
            filters=list(page.filters),
            sort_fields=list(page.sort_fields),
            default_page_size=page.defaults.page_size,
            time_key=page.url_keys.time,
            server_paginated=page.server_paginated,
        )
        for page in registry.list_pages()
    ]


@router.get("/{page_key}/view", response_model=ListViewSnapshot)
async def view_page(
    request: Request,
    page: PageConfig = Depends(get_page),
    factory: ListViewFactory = Depends(get_list_view_factory),
) -> ListViewSnapshot:
    """Mount a list view from the request's query string and return it.

    Endpoint placeholders (e.g. ``collegeslug``) and ``viewport_width`` are
    read from the same query string; they are not part of the view state.
    A backend failure is reported inside the snapshot (``status="error"``).
    """
    params = request.query_params
    path_params = {
        name: params[name] for name in page.path_param_names if name in params
    }
    viewport_width = parse_int(params.get(VIEWPORT_WIDTH_PARAM))

    controller, _, _ = factory.open(
        page,
        query=request.url.query,
        viewport_width=viewport_width,
        path_params=path_params,
    )
    try:
        await controller.mount()
        return controller.snapshot()
    finally:
        controller.dispose()

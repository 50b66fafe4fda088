"""FastAPI dependency injection for page declarations and list view services."""

from fastapi import Depends, HTTPException, Request

from admin_console.models.page import PageConfig
from admin_console.pages.registry import PageRegistry
from admin_console.services.session_store import ListViewFactory, SessionStore


def get_page_registry(request: Request) -> PageRegistry:
    """Return the application-wide PageRegistry stored on app.state."""
    return request.app.state.page_registry


def get_list_view_factory(request: Request) -> ListViewFactory:
    """Return the application-wide ListViewFactory stored on app.state."""
    return request.app.state.list_view_factory


def get_session_store(request: Request) -> SessionStore:
    """Return the application-wide SessionStore stored on app.state."""
    return request.app.state.session_store


def get_page(
    page_key: str,
    registry: PageRegistry = Depends(get_page_registry),
) -> PageConfig:
    """Resolve the ``{page_key}`` path parameter to its declaration."""
    page = registry.get_page(page_key)
    if page is None:
        raise HTTPException(status_code=404, detail="Page not found")
    return page

"""Campus admin console FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from admin_console.config import get_settings
from admin_console.pages.catalog import BUILTIN_PAGES
from admin_console.pages.registry import PageRegistry
from admin_console.repositories.backend_client import BackendClient
from admin_console.services.session_store import ListViewFactory, SessionStore

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application startup and shutdown.

    On startup:
    - Create the shared HTTP client for the REST backend.
    - Register the built-in list pages.
    - Create the list view factory and session store.
    - Store all services on app.state for dependency injection.

    On shutdown:
    - Dispose every open list view session.
    - Close the backend HTTP client.
    """
    settings = get_settings()
    logging.getLogger("admin_console").setLevel(settings.log_level.upper())

    # Backend
    http_client = httpx.AsyncClient(
        base_url=settings.backend_url, timeout=settings.backend_timeout
    )
    backend = BackendClient(http_client)
    app.state.backend = backend

    # Pages
    page_registry = PageRegistry(BUILTIN_PAGES)
    app.state.page_registry = page_registry
    logger.info(
        "Registered list pages: %s",
        ", ".join(page.key for page in page_registry.list_pages()),
    )

    # List views
    factory = ListViewFactory(source=backend, settings=settings)
    app.state.list_view_factory = factory
    session_store = SessionStore(factory, max_sessions=settings.max_sessions)
    app.state.session_store = session_store

    yield

    # Shutdown
    session_store.close_all()
    await http_client.aclose()


app = FastAPI(
    title="Campus Admin Console",
    description="URL-synchronized list views over the campus-services backend",
    version="0.1.0",
    lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Router includes
from admin_console.routers import pages, sessions  # noqa: E402

app.include_router(pages.router)
app.include_router(sessions.pages_router)
app.include_router(sessions.router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Simple health check endpoint."""
    return {"status": "ok"}

"""Campus admin console configuration using Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Campus admin console settings.

    All fields can be overridden via environment variables with
    the CAMPUS_ADMIN_ prefix (e.g., CAMPUS_ADMIN_BACKEND_URL).
    """

    backend_url: str = "http://localhost:5000/api"
    backend_timeout: float = 15.0
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = ["http://localhost:5173"]
    log_level: str = "INFO"

    # View mode policy
    view_breakpoint: int = 1024
    default_viewport_width: int = 1280
    honor_explicit_view_mode: bool = False

    # Calendar convention for the relative time windows; never the host locale
    timezone: str = "UTC"
    week_starts_on: Literal["sunday", "monday"] = "sunday"

    # Pagination
    max_page_size: int = 100
    page_size_options: list[int] = [10, 20, 50, 100]

    max_sessions: int = 256

    model_config = {
        "env_prefix": "CAMPUS_ADMIN_",
        "env_file": ".env",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (singleton)."""
    return Settings()

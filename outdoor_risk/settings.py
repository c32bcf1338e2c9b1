"""
Application settings and logging setup.

Settings come from environment variables or a local ``.env`` file via
pydantic-settings.
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.console import Console
from rich.logging import RichHandler

from outdoor_risk.activities import ActivityRegistry


class Settings(BaseSettings):
    """Configuration for the API, the CLI and the persistence layer."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True, extra="ignore")

    # Database
    DATABASE_URL: str = Field(
        default="sqlite:///outdoor_risk.db",
        description="SQLAlchemy URL for preferences and assessment history"
    )

    # Application
    ENVIRONMENT: str = Field(default="development")
    LOG_LEVEL: str = Field(
        default="",
        description="Logging level (derived from ENVIRONMENT when empty)"
    )

    # CORS
    ALLOWED_ORIGINS: List[str] = Field(
        default=[],
        description="Origins allowed by CORS (localhost dev servers when empty)"
    )

    # Risk engine
    ACTIVITY_CATALOG_PATH: Optional[Path] = Field(
        default=None,
        description="JSON catalog replacing the built-in activity profiles"
    )
    BEST_WINDOW_THRESHOLD: int = Field(default=60, ge=0, le=100)
    FORECAST_SLOT_HOURS: float = Field(default=3.0, gt=0)
    MAX_HISTORY_ITEMS: int = Field(default=100, gt=0)
    MAX_FAVORITE_LOCATIONS: int = Field(default=20, gt=0)

    @model_validator(mode="after")
    def _configure_environment(self) -> "Settings":
        """Derive LOG_LEVEL and CORS origins from ENVIRONMENT when unset."""
        is_prod = self.ENVIRONMENT == "production"
        if not self.LOG_LEVEL:
            self.LOG_LEVEL = "WARNING" if is_prod else "INFO"
        if not self.ALLOWED_ORIGINS:
            self.ALLOWED_ORIGINS = [
                "http://localhost:3000",
                "http://localhost:5173",
                "http://127.0.0.1:3000",
                "http://127.0.0.1:5173",
            ]
        return self


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging(settings: Settings) -> None:
    """Configure root logging once for the API or the CLI."""
    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    handler = RichHandler(console=Console(stderr=True), show_path=False)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logging.basicConfig(level=level, handlers=[handler], force=True)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def build_registry(settings: Settings) -> ActivityRegistry:
    """Registry from ACTIVITY_CATALOG_PATH, or the built-in catalog."""
    if settings.ACTIVITY_CATALOG_PATH is not None:
        return ActivityRegistry.from_file(settings.ACTIVITY_CATALOG_PATH)
    return ActivityRegistry.default()

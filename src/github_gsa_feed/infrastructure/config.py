"""Application configuration — loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Tunables loaded from ``GSA_FEED_*`` env vars (or ``.env`` file).

    The three run parameters (datasource, GitHub and GSA addresses) are
    positional CLI arguments, not settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="GSA_FEED_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: str = "INFO"
    http_timeout: float = 30.0
    user_agent: str = "github-gsa-feed/1.0"
    # GitHub never serves more than 100 elements per page.
    per_page: int = Field(default=100, ge=1, le=100)
    # None disables the page limit.
    max_pages: int | None = Field(default=1000, ge=1)
    readme_filename: str = "README.md"
    gsa_feed_port: int = 19900
    gsa_feed_path: str = "/xmlfeed"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton application settings (cached after first call)."""
    return Settings()

"""Runtime settings for the HTTP service, loaded from the environment."""

from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Service configuration.

    Every field can be overridden with a ``CHESSRULES_`` prefixed environment
    variable, e.g. ``CHESSRULES_PORT=9000``.
    """

    model_config = SettingsConfigDict(env_prefix="CHESSRULES_")

    host: str = Field("0.0.0.0", description="Interface the HTTP server binds to.")
    port: int = Field(8000, ge=1, le=65535, description="Port the HTTP server listens on.")
    log_level: str = Field("INFO", description="Root logging level.")
    default_layout: Optional[str] = Field(
        None, description="Layout used for new games when a request supplies none."
    )


@lru_cache()
def get_settings() -> Settings:
    return Settings()

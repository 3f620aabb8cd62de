"""Mission Control configuration.

Created: 2026-09-14

Settings come from environment variables prefixed ``MISSION_CONTROL_`` and an
optional ``.env`` file in the working directory.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".mission-control"


class Settings(BaseSettings):
    """Mission Control settings."""

    model_config = SettingsConfigDict(
        env_prefix="MISSION_CONTROL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Storage
    data_dir: Path | None = Field(
        default=None, description="Directory holding the JSON collections"
    )

    # API server
    web_host: str = Field(default="127.0.0.1", description="API bind address")
    web_port: int = Field(default=8787, description="API port")
    api_url: str = Field(
        default="http://127.0.0.1:8787", description="Base URL used by workers and scripts"
    )
    webhook_secret: str | None = Field(
        default=None, description="Shared secret for the runner event webhook"
    )

    # Workers
    delivery_webhook_url: str | None = Field(
        default=None, description="Where notification messages are relayed"
    )
    dispatch_webhook_url: str | None = Field(
        default=None, description="Where claimed dispatches are relayed"
    )
    runner_id: str = Field(default="mission-control-runner", description="Claim owner id")
    notification_poll_ms: int = Field(default=5000)
    dispatch_poll_ms: int = Field(default=5000)
    automation_refresh_ms: int = Field(default=30000)
    notification_claim_ttl_ms: int = Field(default=60000)
    watcher_lease_ttl_ms: int = Field(default=8000)
    run_once: bool = Field(default=False, description="Run one worker cycle and exit")

    # Logging
    log_level: str = Field(default="INFO")

    @classmethod
    def load(cls) -> Settings:
        """Load settings from the environment and ``.env``."""
        return cls()


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings.load()


def get_config_dir() -> Path:
    """Get the data directory, creating it if needed."""
    settings = get_settings()
    config_dir = settings.data_dir or DEFAULT_CONFIG_DIR
    config_dir.mkdir(parents=True, exist_ok=True)
    return config_dir

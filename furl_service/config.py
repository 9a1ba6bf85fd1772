"""Configuration management for the resolver service."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_INDEX_HTML = Path(__file__).parent / "static" / "index.html"


class Settings(BaseSettings):
    """Application settings using environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="FURL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Core service
    environment: str = Field("development", description="Deployment environment name")
    log_level: str = Field("INFO", description="Python logging level")
    log_file: Optional[Path] = Field(None, description="Optional rotating log file")
    resolution_log_level: Optional[str] = Field(
        None, description="Level for the per-resolution summary lines, defaults to log_level"
    )

    # Listener
    host: str = Field("127.0.0.1", description="Interface to bind")
    port: int = Field(34737, ge=1, le=65535, description="Port on which the API listens")

    # Pages
    index_html_path: Path = Field(DEFAULT_INDEX_HTML, description="HTML served at /")

    # Background work & monitoring
    enable_cleaner: bool = Field(True, description="Run the periodic and memory-triggered cache cleaner")
    enable_metrics: bool = Field(True, description="Whether to expose Prometheus metrics")

    @field_validator("log_level", "resolution_log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: Optional[str]) -> Optional[str]:
        return value.upper() if isinstance(value, str) else value


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()


__all__ = ["DEFAULT_INDEX_HTML", "Settings", "get_settings"]

"""Configuration utilities for the redirect resolver."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

from . import __version__

DAY_MS = 86_400 * 1000


@dataclass(frozen=True)
class ResolverConfig:
    """Runtime configuration parameters. Durations are in milliseconds."""

    max_hops: int = 10
    request_timeout_ms: int = 5000
    max_cache_age_ms: int = 7 * DAY_MS
    cache_age_rampup_ms: int = DAY_MS
    # A very conservative 64MB of cache-attributable growth
    max_memory_usage: int = 64 * 1024 * 1024
    cleaner_interval_ms: int = 3_600_000
    memory_check_interval_ms: int = 60_000
    memory_trigger_percent: float = 90.0
    error_age_fraction: float = 0.9
    user_agent: str = f"furl/{__version__}"
    default_referer: str = "http://furl.3ft9.com/"

    def __post_init__(self) -> None:
        positive = {
            "max_hops": self.max_hops,
            "request_timeout_ms": self.request_timeout_ms,
            "max_cache_age_ms": self.max_cache_age_ms,
            "cache_age_rampup_ms": self.cache_age_rampup_ms,
            "max_memory_usage": self.max_memory_usage,
            "cleaner_interval_ms": self.cleaner_interval_ms,
            "memory_check_interval_ms": self.memory_check_interval_ms,
        }
        for name, value in positive.items():
            if value <= 0:
                raise ValueError(f"{name} must be positive")
        if not 0.0 <= self.error_age_fraction <= 1.0:
            raise ValueError("error_age_fraction must be between 0 and 1")

    @property
    def request_timeout(self) -> float:
        """Per-hop timeout in seconds."""
        return self.request_timeout_ms / 1000

    @property
    def error_backdate_ms(self) -> int:
        return int(self.max_cache_age_ms * self.error_age_fraction)


def load_config(env_file: Optional[str] = ".env") -> ResolverConfig:
    """Load configuration from environment variables and optional .env file."""

    if env_file:
        load_dotenv(env_file, override=False)

    return ResolverConfig(
        max_hops=int(os.getenv("FURL_MAX_HOPS", ResolverConfig.max_hops)),
        request_timeout_ms=int(os.getenv("FURL_REQUEST_TIMEOUT_MS", ResolverConfig.request_timeout_ms)),
        max_cache_age_ms=int(os.getenv("FURL_MAX_CACHE_AGE_MS", ResolverConfig.max_cache_age_ms)),
        cache_age_rampup_ms=int(os.getenv("FURL_CACHE_AGE_RAMPUP_MS", ResolverConfig.cache_age_rampup_ms)),
        max_memory_usage=int(os.getenv("FURL_MAX_MEMORY_USAGE", ResolverConfig.max_memory_usage)),
        cleaner_interval_ms=int(os.getenv("FURL_CLEANER_INTERVAL_MS", ResolverConfig.cleaner_interval_ms)),
        memory_check_interval_ms=int(
            os.getenv("FURL_MEMORY_CHECK_INTERVAL_MS", ResolverConfig.memory_check_interval_ms)
        ),
        memory_trigger_percent=float(
            os.getenv("FURL_MEMORY_TRIGGER_PERCENT", ResolverConfig.memory_trigger_percent)
        ),
        user_agent=os.getenv("FURL_USER_AGENT", ResolverConfig.user_agent),
        default_referer=os.getenv("FURL_DEFAULT_REFERER", ResolverConfig.default_referer),
    )


__all__ = ["DAY_MS", "ResolverConfig", "load_config"]

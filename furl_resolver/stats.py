"""Process-wide counters for resolutions and cache cleaning."""

from __future__ import annotations

import threading
from dataclasses import asdict, dataclass


@dataclass
class StatsCounters:
    hits: int = 0
    misses: int = 0
    successful: int = 0
    failures: int = 0
    last_response: int = 0
    total_hops: int = 0
    cleaner_runs: int = 0
    cleaner_cleaned: int = 0
    cleaner_last: int = 0
    cleaner_last_duration: int = 0

    def __post_init__(self) -> None:
        self._lock = threading.Lock()

    def incr(self, name: str, amount: int = 1) -> None:
        with self._lock:
            setattr(self, name, getattr(self, name) + amount)

    def set(self, name: str, value: int) -> None:
        with self._lock:
            setattr(self, name, value)

    def as_dict(self) -> dict:
        with self._lock:
            return asdict(self)


__all__ = ["StatsCounters"]

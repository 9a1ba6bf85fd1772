"""In-memory cache store for resolution outcomes."""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from typing import Callable, Dict, List, Optional


@dataclass(frozen=True)
class CacheRecord:
    last_access: int
    code: int
    text: str

    def touched(self, now: int) -> "CacheRecord":
        return replace(self, last_access=now)


class CacheStore:
    """Thread-safe mapping of URL to :class:`CacheRecord`.

    Records are immutable, every write swaps a whole record under the lock so
    readers never observe a partial update.
    """

    def __init__(self) -> None:
        self._data: Dict[str, CacheRecord] = {}
        self._lock = threading.RLock()

    def get(self, key: str) -> Optional[CacheRecord]:
        with self._lock:
            return self._data.get(key)

    def put(self, key: str, record: CacheRecord) -> None:
        with self._lock:
            self._data[key] = record

    def touch(self, key: str, now: int) -> Optional[CacheRecord]:
        """Refresh ``last_access`` and return the refreshed record, if any."""
        with self._lock:
            record = self._data.get(key)
            if record is None:
                return None
            record = record.touched(now)
            self._data[key] = record
            return record

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def delete_if(self, key: str, predicate: Callable[[CacheRecord], bool]) -> bool:
        """Delete ``key`` only if the live record still satisfies ``predicate``."""
        with self._lock:
            record = self._data.get(key)
            if record is None or not predicate(record):
                return False
            del self._data[key]
            return True

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._data)

    def size(self) -> int:
        with self._lock:
            return len(self._data)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._data

    def __len__(self) -> int:
        return self.size()


__all__ = ["CacheRecord", "CacheStore"]

"""In-memory counter store.

Notes:
- Per-process only: running multiple workers multiplies the effective quota.
- Thread-safe: uses a lock around shared state.
- Expiry is evaluated lazily by comparing deadlines against the clock.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable

from quotagate.adapters.counter_store.base import AbstractCounterStore
from quotagate.core.errors import CounterStoreError


@dataclass
class _Entry:
    value: int
    expires_at: float | None = None


class InMemoryCounterStore(AbstractCounterStore):
    """Counter store held in a dict, mirroring Redis GET/SET/INCR/EXPIRE.

    Args:
        clock: Time source returning UNIX time in seconds. Tests inject a
            ``Mock`` to move time forward without sleeping.
    """

    def __init__(self, *, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: dict[str, _Entry] = {}

    def _live_entry(self, key: str) -> _Entry | None:
        """Return the entry for ``key`` unless it has expired (must hold lock)."""
        entry = self._entries.get(key)
        if entry is None:
            return None
        if entry.expires_at is not None and self._clock() >= entry.expires_at:
            del self._entries[key]
            return None
        return entry

    def ttl(self, key: str) -> float | None:
        """Remaining lifetime of ``key`` in seconds, None if absent or persistent."""
        with self._lock:
            entry = self._live_entry(key)
            if entry is None or entry.expires_at is None:
                return None
            return entry.expires_at - self._clock()

    async def get(self, key: str) -> int:
        with self._lock:
            entry = self._live_entry(key)
            return entry.value if entry else 0

    def _deadline(self, ttl_seconds: int, operation: str) -> float:
        try:
            return self._clock() + ttl_seconds
        except OverflowError as exc:
            raise CounterStoreError(
                code="counter_ttl_invalid",
                message="Counter TTL is out of range",
                details={"operation": operation},
            ) from exc

    async def set(self, key: str, value: int, ttl_seconds: int | None = None) -> None:
        with self._lock:
            expires_at = self._deadline(ttl_seconds, "set") if ttl_seconds else None
            self._entries[key] = _Entry(value=value, expires_at=expires_at)

    async def incr(self, key: str) -> int:
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                # INCR on a missing key creates it without a TTL
                entry = _Entry(value=0)
                self._entries[key] = entry
            entry.value += 1
            return entry.value

    async def expire(self, key: str, ttl_seconds: int) -> None:
        with self._lock:
            entry = self._live_entry(key)
            if entry is None:
                raise CounterStoreError(
                    code="counter_key_missing",
                    message="Cannot set expiry on a missing counter key",
                    details={"operation": "expire"},
                )
            entry.expires_at = self._deadline(ttl_seconds, "expire")

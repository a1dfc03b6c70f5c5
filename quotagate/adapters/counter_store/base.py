"""Counter store interface.

Every operation may raise ``CounterStoreError``; implementations must not
leak backend-specific exceptions to callers.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class AbstractCounterStore(ABC):
    """String-keyed integer counters with per-key expiry."""

    @abstractmethod
    async def get(self, key: str) -> int:
        """Return the current count for ``key`` (0 when absent or expired).

        Raises:
            CounterStoreError: If the store is unreachable or the stored
                value is not an integer.
        """
        raise NotImplementedError

    @abstractmethod
    async def set(self, key: str, value: int, ttl_seconds: int | None = None) -> None:
        """Overwrite ``key`` with ``value``, optionally with a TTL in seconds.

        Raises:
            CounterStoreError: On backend failure.
        """
        raise NotImplementedError

    @abstractmethod
    async def incr(self, key: str) -> int:
        """Atomically add 1 to ``key``, creating it at 1 when absent.

        Returns:
            The counter value after the increment.

        Raises:
            CounterStoreError: On backend failure.
        """
        raise NotImplementedError

    @abstractmethod
    async def expire(self, key: str, ttl_seconds: int) -> None:
        """Set or refresh the TTL of an existing key.

        Raises:
            CounterStoreError: On backend failure, or when ``key`` does not
                exist (the TTL could not be applied).
        """
        raise NotImplementedError

    async def ping(self) -> bool:
        """Report whether the backend is reachable. Always true by default."""
        return True

    async def close(self) -> None:
        """Release backend resources. No-op by default."""
        return None

"""Factory for the configured counter store backend."""

from quotagate.adapters.counter_store.base import AbstractCounterStore
from quotagate.adapters.counter_store.in_memory import InMemoryCounterStore
from quotagate.adapters.counter_store.redis_store import RedisCounterStore
from quotagate.core.config import Settings
from quotagate.core.errors import ValidationAppError


def create_counter_store(app_settings: Settings) -> AbstractCounterStore:
    """Instantiate the counter store selected by ``APP_STORE_BACKEND``.

    Returns:
        AbstractCounterStore: Redis store (shared across workers) or the
            in-memory store (single process only).

    Raises:
        ValidationAppError: If the backend name is unknown.
    """
    backend = app_settings.app.store_backend.lower()

    if backend == "redis":
        return RedisCounterStore.from_settings(app_settings.redis)

    if backend == "memory":
        return InMemoryCounterStore()

    raise ValidationAppError(
        code="unknown_store_backend",
        message=f"Unknown counter store backend: '{backend}'. Supported backends: redis, memory",
    )

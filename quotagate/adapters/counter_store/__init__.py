"""Counter store adapters.

The admission engine depends only on ``AbstractCounterStore``. Redis backs
production deployments; the in-memory store serves tests and single-process
development with the same semantics.
"""

from quotagate.adapters.counter_store.base import AbstractCounterStore
from quotagate.adapters.counter_store.in_memory import InMemoryCounterStore
from quotagate.adapters.counter_store.redis_store import RedisCounterStore

__all__ = ["AbstractCounterStore", "InMemoryCounterStore", "RedisCounterStore"]

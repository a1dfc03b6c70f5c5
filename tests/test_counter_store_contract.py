"""Behaviour shared by every counter store backend.

The in-memory store runs against a controllable clock. The Redis store runs
against a live server only when REDIS_HOST is set and reachable; its TTL
checks sleep for real.
"""

from __future__ import annotations

import asyncio
import os
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator, Awaitable, Callable
from unittest.mock import Mock

import pytest

from quotagate.adapters.counter_store.base import AbstractCounterStore
from quotagate.adapters.counter_store.in_memory import InMemoryCounterStore
from quotagate.adapters.counter_store.redis_store import RedisCounterStore
from quotagate.core.config import RedisSettings
from quotagate.core.errors import CounterStoreError


@dataclass
class Backend:
    store: AbstractCounterStore
    advance: Callable[[float], Awaitable[None]]


@pytest.fixture(params=["memory", "redis"])
def backend(request: pytest.FixtureRequest, clock: Mock) -> Backend:
    if request.param == "memory":

        async def advance(seconds: float) -> None:
            clock.return_value += seconds

        return Backend(InMemoryCounterStore(clock=clock), advance)

    if not os.environ.get("REDIS_HOST"):
        pytest.skip("REDIS_HOST not set")
    # Unique prefix per test so runs never share counters
    store = RedisCounterStore.from_settings(RedisSettings(prefix=f"quotagate-test:{uuid.uuid4().hex}:"))
    return Backend(store, asyncio.sleep)


@asynccontextmanager
async def opened(backend: Backend) -> AsyncIterator[AbstractCounterStore]:
    try:
        try:
            await backend.store.ping()
        except CounterStoreError:
            pytest.skip("Redis not reachable")
        yield backend.store
    finally:
        await backend.store.close()


@pytest.mark.asyncio
async def test_missing_key_reads_zero(backend: Backend) -> None:
    async with opened(backend) as store:
        assert await store.get("[ip]nobody") == 0


@pytest.mark.asyncio
async def test_incr_creates_then_counts(backend: Backend) -> None:
    async with opened(backend) as store:
        assert await store.incr("[ip]1.2.3.4") == 1
        assert await store.incr("[ip]1.2.3.4") == 2
        assert await store.get("[ip]1.2.3.4") == 2
        await store.expire("[ip]1.2.3.4", 5)


@pytest.mark.asyncio
async def test_expire_on_missing_key_raises(backend: Backend) -> None:
    async with opened(backend) as store:
        with pytest.raises(CounterStoreError) as exc_info:
            await store.expire("[ip]missing", 5)

        assert exc_info.value.code == "counter_key_missing"


@pytest.mark.asyncio
async def test_ttl_lapse_resets_count(backend: Backend) -> None:
    async with opened(backend) as store:
        await store.incr("[token]abc")
        await store.expire("[token]abc", 1)
        assert await store.get("[token]abc") == 1

        await backend.advance(1.1)

        assert await store.get("[token]abc") == 0
        assert await store.incr("[token]abc") == 1
        await store.expire("[token]abc", 1)


@pytest.mark.asyncio
async def test_set_with_ttl_overwrites_and_expires(backend: Backend) -> None:
    async with opened(backend) as store:
        await store.set("[ip]5.6.7.8", 4, ttl_seconds=1)
        assert await store.get("[ip]5.6.7.8") == 4

        await backend.advance(1.1)

        assert await store.get("[ip]5.6.7.8") == 0

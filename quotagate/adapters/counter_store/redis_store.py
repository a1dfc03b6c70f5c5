"""Redis-backed counter store.

Counters live in Redis so every worker and replica shares one quota per
identity. ``INCR`` is atomic server-side, which is the only cross-request
coordination the admission engine relies on.
"""

from __future__ import annotations

import logging

import redis.asyncio as redis
from redis.exceptions import RedisError

from quotagate.adapters.counter_store.base import AbstractCounterStore
from quotagate.core.config import RedisSettings
from quotagate.core.errors import CounterStoreError
from quotagate.core.logging import hash_for_log

logger = logging.getLogger(__name__)


class RedisCounterStore(AbstractCounterStore):
    """Counter store over a ``redis.asyncio.Redis`` client.

    Args:
        client: Connected (or lazily connecting) async Redis client.
        prefix: Namespace prepended to every key.
    """

    def __init__(self, client: redis.Redis, *, prefix: str = "") -> None:
        self._client = client
        self._prefix = prefix

    @classmethod
    def from_settings(cls, redis_settings: RedisSettings) -> "RedisCounterStore":
        """Build a store with its own connection pool from configuration."""
        client = redis.Redis(
            host=redis_settings.host,
            port=redis_settings.port,
            password=redis_settings.password,
            db=redis_settings.db,
            decode_responses=True,
            socket_timeout=redis_settings.socket_timeout_seconds,
            socket_connect_timeout=redis_settings.socket_timeout_seconds,
        )
        return cls(client, prefix=redis_settings.prefix)

    def _key(self, key: str) -> str:
        return f"{self._prefix}{key}"

    def _failure(self, operation: str, key: str, exc: Exception) -> CounterStoreError:
        key_hash = hash_for_log(key)
        logger.error(
            "counter_store.redis_error",
            extra={
                "operation": operation,
                "key_hash": key_hash,
                "error_type": type(exc).__name__,
                "error_msg": str(exc),
            },
        )
        return CounterStoreError(
            code="counter_store_unavailable",
            message=f"Redis {operation} failed",
            details={"operation": operation, "key_hash": key_hash},
        )

    async def get(self, key: str) -> int:
        try:
            raw = await self._client.get(self._key(key))
        except RedisError as exc:
            raise self._failure("get", key, exc) from exc

        if raw is None:
            return 0
        try:
            return int(raw)
        except (TypeError, ValueError) as exc:
            raise CounterStoreError(
                code="counter_value_invalid",
                message="Stored counter value is not an integer",
                details={"operation": "get", "key_hash": hash_for_log(key)},
            ) from exc

    async def set(self, key: str, value: int, ttl_seconds: int | None = None) -> None:
        try:
            await self._client.set(self._key(key), value, ex=ttl_seconds or None)
        except RedisError as exc:
            raise self._failure("set", key, exc) from exc

    async def incr(self, key: str) -> int:
        try:
            return int(await self._client.incr(self._key(key)))
        except RedisError as exc:
            raise self._failure("incr", key, exc) from exc

    async def expire(self, key: str, ttl_seconds: int) -> None:
        try:
            applied = await self._client.expire(self._key(key), ttl_seconds)
        except RedisError as exc:
            raise self._failure("expire", key, exc) from exc

        if not applied:
            # Key vanished between INCR and EXPIRE (evicted or flushed)
            raise CounterStoreError(
                code="counter_key_missing",
                message="Cannot set expiry on a missing counter key",
                details={"operation": "expire", "key_hash": hash_for_log(key)},
            )

    async def ping(self) -> bool:
        try:
            return bool(await self._client.ping())
        except RedisError as exc:
            raise self._failure("ping", "", exc) from exc

    async def close(self) -> None:
        await self._client.aclose()

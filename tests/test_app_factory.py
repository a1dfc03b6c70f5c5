"""Tests for settings-driven app construction."""

import pytest

from quotagate.adapters.counter_store.factory import create_counter_store
from quotagate.adapters.counter_store.in_memory import InMemoryCounterStore
from quotagate.adapters.counter_store.redis_store import RedisCounterStore
from quotagate.core.app_factory import create_app
from quotagate.core.config import AppSettings, RateLimitSettings, RedisSettings, Settings
from quotagate.core.errors import ValidationAppError
from quotagate.core.quota import Quota


@pytest.mark.parametrize(
    ("backend", "expected_type"),
    [("memory", InMemoryCounterStore), ("redis", RedisCounterStore), ("REDIS", RedisCounterStore)],
)
def test_store_backend_selection(backend: str, expected_type: type) -> None:
    cfg = Settings(app=AppSettings(store_backend=backend), redis=RedisSettings(prefix="x:"))

    assert isinstance(create_counter_store(cfg), expected_type)


def test_unknown_store_backend_raises() -> None:
    with pytest.raises(ValidationAppError) as exc_info:
        create_counter_store(Settings(app=AppSettings(store_backend="memcached")))

    assert exc_info.value.code == "unknown_store_backend"


def test_engine_receives_configured_address_quota() -> None:
    cfg = Settings(rate_limit=RateLimitSettings(ip_max_requests=7, ip_block_duration=90))

    app = create_app(cfg, store=InMemoryCounterStore())

    assert app.state.admission_engine.address_quota == Quota(max_requests=7, window_seconds=90)
    assert app.state.settings is cfg


def test_rate_limit_env_vars(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RATE_LIMIT_IP_MAX_REQUESTS", "3")
    monkeypatch.setenv("RATE_LIMIT_IP_BLOCK_DURATION", "15")
    monkeypatch.setenv("RATE_LIMIT_CREDENTIAL_HEADER", "X-Token")

    rate_limit = RateLimitSettings()

    assert rate_limit.ip_max_requests == 3
    assert rate_limit.ip_block_duration == 15
    assert rate_limit.credential_header == "X-Token"

"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any import that builds settings.
"""

import os

os.environ["APP_ENV"] = "testing"
os.environ.setdefault("AUTH_JWT_SECRET", "test-secret-0123456789abcdef0123456789abcdef")
os.environ.setdefault("APP_STORE_BACKEND", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from datetime import datetime, timedelta, timezone  # noqa: E402
from typing import Any, Callable  # noqa: E402
from unittest.mock import Mock  # noqa: E402

import jwt  # noqa: E402
import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from quotagate.adapters.counter_store.in_memory import InMemoryCounterStore  # noqa: E402
from quotagate.adapters.credentials.jwt_authority import JwtCredentialAuthority  # noqa: E402
from quotagate.core.app_factory import create_app  # noqa: E402
from quotagate.core.config import RateLimitSettings, Settings  # noqa: E402
from quotagate.core.quota import Quota  # noqa: E402
from quotagate.services.admission import AdmissionEngine  # noqa: E402

TEST_SECRET = os.environ["AUTH_JWT_SECRET"]


@pytest.fixture
def clock() -> Mock:
    """Controllable UNIX clock starting at t=1000s."""
    return Mock(return_value=1000.0)


@pytest.fixture
def store(clock: Mock) -> InMemoryCounterStore:
    return InMemoryCounterStore(clock=clock)


@pytest.fixture
def authority() -> JwtCredentialAuthority:
    return JwtCredentialAuthority(TEST_SECRET)


@pytest.fixture
def make_engine(store: InMemoryCounterStore, authority: JwtCredentialAuthority) -> Callable[..., AdmissionEngine]:
    """Build an engine over the shared in-memory store with a chosen address quota."""

    def _make(max_requests: int = 2, window_seconds: int = 1, **kwargs: Any) -> AdmissionEngine:
        params: dict[str, Any] = {
            "store": store,
            "validator": authority,
            "address_quota": Quota(max_requests=max_requests, window_seconds=window_seconds),
        }
        params.update(kwargs)
        return AdmissionEngine(**params)

    return _make


@pytest.fixture
def encode_claims() -> Callable[..., str]:
    """Sign an arbitrary payload with the test secret (for crafted credentials)."""

    def _encode(secret: str = TEST_SECRET, **overrides: Any) -> str:
        now = datetime.now(timezone.utc)
        payload: dict[str, Any] = {
            "sub": "_generic",
            "max_access": 1,
            "interval_access": 120,
            "iat": now,
            "exp": now + timedelta(minutes=5),
        }
        payload.update(overrides)
        payload = {k: v for k, v in payload.items() if v is not None}
        return jwt.encode(payload, secret, algorithm="HS256")

    return _encode


@pytest.fixture
def make_client(clock: Mock) -> Callable[..., TestClient]:
    """Build a TestClient over an isolated app and in-memory store."""

    def _make(**rate_limit_overrides: Any) -> TestClient:
        rate_limit = RateLimitSettings(**{"ip_max_requests": 1, "ip_block_duration": 60, **rate_limit_overrides})
        app_settings = Settings(rate_limit=rate_limit)
        app = create_app(app_settings, store=InMemoryCounterStore(clock=clock))
        return TestClient(app)

    return _make

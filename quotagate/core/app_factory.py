"""Application factory for the quota gateway.

Builds the collaborators (counter store, credential authority, admission
engine) from an explicit ``Settings`` instance and hangs them on
``app.state`` so dependencies never read module-level globals.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from quotagate import __version__
from quotagate.adapters.counter_store.base import AbstractCounterStore
from quotagate.adapters.counter_store.factory import create_counter_store
from quotagate.adapters.credentials.jwt_authority import JwtCredentialAuthority
from quotagate.api.routes import health_router, root_router, token_router
from quotagate.core.config import Settings, settings
from quotagate.core.exception_handlers import setup_exception_handlers
from quotagate.core.logging import configure_logging
from quotagate.core.middleware import request_id_middleware
from quotagate.core.openapi import apply_openapi_customizations
from quotagate.core.quota import Quota
from quotagate.services.admission import AdmissionEngine

logger = logging.getLogger(__name__)


def create_app(
    app_settings: Settings | None = None,
    *,
    store: AbstractCounterStore | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application instance.

    Args:
        app_settings: Settings to build from; defaults to the process settings.
        store: Counter store override (tests pass an in-memory store).

    Returns:
        Configured FastAPI app with middleware, handlers and routers.
    """
    cfg = app_settings or settings

    # Logging first so subsequent init logs are formatted as desired
    configure_logging(cfg.log)

    counter_store = store or create_counter_store(cfg)
    authority = JwtCredentialAuthority(cfg.auth.jwt_secret, algorithm=cfg.auth.jwt_algorithm)
    address_quota = Quota(
        max_requests=cfg.rate_limit.ip_max_requests,
        window_seconds=cfg.rate_limit.ip_block_duration,
    )
    if not address_quota.is_valid:
        logger.warning(
            "rate_limit.address_quota_invalid",
            extra={
                "limit": address_quota.max_requests,
                "window_s": address_quota.window_seconds,
                "effect": "all address-based requests will be denied",
            },
        )

    engine = AdmissionEngine(
        store=counter_store,
        validator=authority,
        address_quota=address_quota,
        deny_anonymous=cfg.rate_limit.deny_anonymous,
    )

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        try:
            yield
        finally:
            await counter_store.close()

    app = FastAPI(
        title="Quota Gate",
        description=(
            "Per-client request quotas enforced in front of an HTTP service. "
            "Clients are counted by network address, or by a signed credential "
            "that carries its own quota."
        ),
        version=__version__,
        debug=cfg.app.debug,
        lifespan=lifespan,
    )

    app.state.settings = cfg
    app.state.counter_store = counter_store
    app.state.credential_authority = authority
    app.state.admission_engine = engine

    app.middleware("http")(request_id_middleware)

    setup_exception_handlers(app)

    app.include_router(root_router)
    app.include_router(token_router)
    app.include_router(health_router)

    apply_openapi_customizations(app, cfg.rate_limit.credential_header)

    return app

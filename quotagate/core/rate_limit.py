"""Rate limiting dependency for FastAPI routes.

Extracts the caller identity from the request, asks the admission engine for
a decision and short-circuits with 429 on denial. Failure reasons are never
exposed to the caller; over-quota and internal failures look the same.

Identity extraction:
- Credential: the configured credential header, verbatim.
- Address: first non-empty ``X-Forwarded-For`` entry, then ``X-Real-IP``,
  then the transport peer host.
"""

from __future__ import annotations

from fastapi import Request

from quotagate.core.config import RateLimitSettings
from quotagate.core.errors import RateLimitExceededError
from quotagate.core.quota import resolve_identity
from quotagate.services.admission import AdmissionEngine

FORWARDED_FOR_HEADER = "X-Forwarded-For"
REAL_IP_HEADER = "X-Real-IP"


def extract_client_address(request: Request) -> str:
    """Return the best-effort client address, or "" when none is known.

    Args:
        request: Incoming request.

    Returns:
        str: Address without port. Starlette already strips the port from
            the peer address.
    """

    forwarded_for = request.headers.get(FORWARDED_FOR_HEADER)
    if forwarded_for:
        for candidate in forwarded_for.split(","):
            candidate = candidate.strip()
            if candidate:
                return candidate

    real_ip = request.headers.get(REAL_IP_HEADER, "").strip()
    if real_ip:
        return real_ip

    if request.client and request.client.host:
        return request.client.host
    return ""


def extract_credential(request: Request, header_name: str) -> str:
    return request.headers.get(header_name, "")


async def enforce_rate_limit(request: Request) -> None:
    """FastAPI dependency enforcing per-identity quotas.

    The engine and rate limit settings are read from ``request.app.state``
    (installed by the application factory).

    Raises:
        RateLimitExceededError: When the admission engine denies the request.
    """

    rate_limit_settings: RateLimitSettings = request.app.state.settings.rate_limit
    if not rate_limit_settings.enabled:
        return

    engine: AdmissionEngine = request.app.state.admission_engine
    identity = resolve_identity(
        extract_client_address(request),
        extract_credential(request, rate_limit_settings.credential_header),
    )

    if not await engine.allow(identity):
        raise RateLimitExceededError(
            code="rate_limit_exceeded",
            message="Rate limit exceeded",
        )

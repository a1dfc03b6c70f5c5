"""HMAC-signed JWT quota credentials (PyJWT).

Payload layout::

    {"sub": "...", "max_access": 10, "interval_access": 60, "iat": ..., "exp": ...}

``max_access`` is the request budget and ``interval_access`` the window in
seconds. Both the issuer and the validator share one symmetric secret.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from quotagate.adapters.credentials.base import AbstractCredentialValidator, CredentialClaims
from quotagate.core.errors import CredentialValidationError, ValidationAppError
from quotagate.core.quota import MAX_REQUESTS, MAX_WINDOW_SECONDS, Quota

logger = logging.getLogger(__name__)

MAX_REQUESTS_CLAIM = "max_access"
WINDOW_SECONDS_CLAIM = "interval_access"

_REQUIRED_CLAIMS = ["exp", "iat", "sub", MAX_REQUESTS_CLAIM, WINDOW_SECONDS_CLAIM]


def _int_claim(payload: dict[str, Any], name: str) -> int:
    value = payload.get(name)
    # bool is an int subclass; true/false is not a quota
    if isinstance(value, bool) or not isinstance(value, int):
        raise CredentialValidationError(
            code="credential_malformed",
            message=f"Credential claim '{name}' must be an integer",
            details={"reason": "claim_type"},
        )
    return value


class JwtCredentialAuthority(AbstractCredentialValidator):
    """Issues and validates quota credentials as signed JWTs.

    Args:
        secret: Shared signing secret.
        algorithm: HMAC algorithm name understood by PyJWT.
        leeway_seconds: Clock skew tolerated when checking ``exp``/``iat``.

    Raises:
        ValueError: If the secret is empty or the algorithm is not symmetric.
    """

    def __init__(self, secret: str, *, algorithm: str = "HS256", leeway_seconds: int = 0) -> None:
        if not secret:
            raise ValueError("secret must be a non-empty string")
        if not algorithm.upper().startswith("HS"):
            raise ValueError("algorithm must be an HMAC (HS*) algorithm")

        self._secret = secret
        self._algorithm = algorithm.upper()
        self._leeway = leeway_seconds

    def issue(
        self,
        subject: str,
        *,
        max_requests: int,
        window_seconds: int,
        lifetime: timedelta,
    ) -> str:
        """Sign a credential granting ``max_requests`` per ``window_seconds``.

        Raises:
            ValidationAppError: If a quota value is out of range or the lifetime
                is not positive.
        """
        if not Quota(max_requests, window_seconds).is_valid:
            raise ValidationAppError(
                code="invalid_quota",
                message="max_requests and window_seconds are out of range",
                details={
                    "hint": f"Use 1..{MAX_REQUESTS} requests and 1..{MAX_WINDOW_SECONDS} seconds"
                },
            )
        if lifetime <= timedelta(0):
            raise ValidationAppError(
                code="invalid_lifetime",
                message="Credential lifetime must be positive",
            )

        now = datetime.now(timezone.utc)
        payload = {
            "sub": subject,
            MAX_REQUESTS_CLAIM: max_requests,
            WINDOW_SECONDS_CLAIM: window_seconds,
            "iat": now,
            "exp": now + lifetime,
        }
        token = jwt.encode(payload, self._secret, algorithm=self._algorithm)

        logger.info(
            "credential.issued",
            extra={
                "subject": subject,
                "max_requests": max_requests,
                "window_s": window_seconds,
                "lifetime_s": int(lifetime.total_seconds()),
            },
        )
        return token

    def validate(self, credential: str) -> CredentialClaims:
        try:
            payload = jwt.decode(
                credential,
                self._secret,
                algorithms=[self._algorithm],
                leeway=self._leeway,
                options={"require": _REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as exc:
            raise CredentialValidationError(
                code="credential_expired",
                message="Credential has expired",
                details={"reason": "expired"},
            ) from exc
        except jwt.InvalidSignatureError as exc:
            raise CredentialValidationError(
                code="credential_invalid_signature",
                message="Credential signature verification failed",
                details={"reason": "signature"},
            ) from exc
        except jwt.PyJWTError as exc:
            raise CredentialValidationError(
                code="credential_malformed",
                message="Credential could not be decoded",
                details={"reason": type(exc).__name__},
            ) from exc

        quota = Quota(
            max_requests=_int_claim(payload, MAX_REQUESTS_CLAIM),
            window_seconds=_int_claim(payload, WINDOW_SECONDS_CLAIM),
        )
        return CredentialClaims(
            subject=str(payload["sub"]),
            quota=quota,
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )

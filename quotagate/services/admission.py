"""Admission engine: decides whether a request fits its identity's quota.

Counting scheme: one integer counter per identity key. A request is admitted
while the counter is below ``max_requests``; each admitted request increments
the counter and refreshes its TTL to ``window_seconds``. The window therefore
lapses ``window_seconds`` after the last counted request rather than on a
clock boundary.

Concurrency: the engine holds no lock. ``get`` followed by ``incr`` can race,
letting up to (concurrent racers - 1) requests through beyond the quota.
The store's atomic ``incr`` guarantees no increments are lost.

Every failure (store error, bad credential, bad quota) resolves to a denial.
Reasons are only visible in the logs, never to the caller.
"""

from __future__ import annotations

import logging

from quotagate.adapters.counter_store.base import AbstractCounterStore
from quotagate.adapters.credentials.base import AbstractCredentialValidator
from quotagate.core.errors import CounterStoreError, CredentialValidationError
from quotagate.core.logging import hash_for_log
from quotagate.core.quota import Credential, Identity, NetworkAddress, Quota, resolve_identity

logger = logging.getLogger(__name__)


class AdmissionEngine:
    """Allow/deny decisions backed by a shared counter store.

    Args:
        store: Counter store shared by all workers.
        validator: Verifies credentials and extracts their embedded quota.
        address_quota: Quota applied to every network-address identity.
        deny_anonymous: Deny requests that carry neither an address nor a
            credential instead of counting them in one shared bucket.
    """

    def __init__(
        self,
        *,
        store: AbstractCounterStore,
        validator: AbstractCredentialValidator,
        address_quota: Quota,
        deny_anonymous: bool = True,
    ) -> None:
        self._store = store
        self._validator = validator
        self._address_quota = address_quota
        self._deny_anonymous = deny_anonymous

    @property
    def address_quota(self) -> Quota:
        return self._address_quota

    async def allow_request(self, address: str | None, credential: str | None) -> bool:
        """Admit or reject a request from ``address`` presenting ``credential``.

        A non-empty credential takes precedence and ``address`` is ignored.
        """
        return await self.allow(resolve_identity(address, credential))

    async def allow(self, identity: Identity | None) -> bool:
        """Admit or reject a request for an already resolved identity."""
        if identity is None:
            if self._deny_anonymous:
                logger.warning("admission.denied", extra={"reason": "no_identity"})
                return False
            identity = NetworkAddress("")

        if isinstance(identity, Credential):
            return await self._allow_credential(identity)
        return await self._admit(identity.counter_key, self._address_quota, key_type=identity.key_type)

    async def _allow_credential(self, identity: Credential) -> bool:
        try:
            claims = self._validator.validate(identity.value)
        except CredentialValidationError as exc:
            logger.warning(
                "admission.denied",
                extra={
                    "reason": "invalid_credential",
                    "key_type": identity.key_type,
                    "error_code": exc.code,
                },
            )
            return False

        return await self._admit(identity.counter_key, claims.quota, key_type=identity.key_type)

    async def _admit(self, key: str, quota: Quota, *, key_type: str) -> bool:
        """Run the fixed-window check for ``key`` and charge it when admitted."""
        log_ctx = {
            "key_type": key_type,
            "key_hash": hash_for_log(key),
            "limit": quota.max_requests,
            "window_s": quota.window_seconds,
        }

        # Out-of-range quotas come from misconfiguration and never admit.
        if not quota.is_valid:
            logger.error("admission.denied", extra={**log_ctx, "reason": "invalid_quota"})
            return False

        try:
            count = await self._store.get(key)
        except CounterStoreError as exc:
            logger.error(
                "admission.denied",
                extra={**log_ctx, "reason": "store_error", "operation": "get", "error_code": exc.code},
            )
            return False

        if count >= quota.max_requests:
            logger.warning(
                "admission.denied",
                extra={**log_ctx, "reason": "quota_exceeded", "count": count},
            )
            return False

        try:
            await self._store.incr(key)
        except CounterStoreError as exc:
            logger.error(
                "admission.denied",
                extra={**log_ctx, "reason": "store_error", "operation": "incr", "error_code": exc.code},
            )
            return False

        try:
            await self._store.expire(key, quota.window_seconds)
        except CounterStoreError as exc:
            # The increment already landed: this request is charged but denied.
            logger.error(
                "admission.denied",
                extra={**log_ctx, "reason": "store_error", "operation": "expire", "error_code": exc.code},
            )
            return False

        logger.debug("admission.allowed", extra={**log_ctx, "count": count + 1})
        return True

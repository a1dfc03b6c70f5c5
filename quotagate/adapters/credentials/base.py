"""Credential validator interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

from quotagate.core.quota import Quota


@dataclass(frozen=True)
class CredentialClaims:
    """Verified contents of a quota credential.

    Attributes:
        subject: Identity the credential was issued to.
        quota: Quota embedded at issuance; trusted verbatim once verified.
        issued_at: Issuance instant (UTC).
        expires_at: Expiration instant (UTC).
    """

    subject: str
    quota: Quota
    issued_at: datetime
    expires_at: datetime


class AbstractCredentialValidator(ABC):
    """Interface for verifying quota credentials."""

    @abstractmethod
    def validate(self, credential: str) -> CredentialClaims:
        """Verify integrity and expiry of ``credential`` and extract its claims.

        Args:
            credential: Opaque signed credential string.

        Returns:
            CredentialClaims with the embedded quota.

        Raises:
            CredentialValidationError: If the credential is malformed,
                expired, or its signature does not verify.
        """
        raise NotImplementedError

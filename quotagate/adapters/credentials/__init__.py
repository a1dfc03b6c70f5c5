"""Quota credential adapters.

A credential is a signed token whose payload carries the holder's quota.
The admission engine depends only on ``AbstractCredentialValidator``.
"""

from quotagate.adapters.credentials.base import AbstractCredentialValidator, CredentialClaims
from quotagate.adapters.credentials.jwt_authority import JwtCredentialAuthority

__all__ = ["AbstractCredentialValidator", "CredentialClaims", "JwtCredentialAuthority"]

"""Application-level exception types.

Adapters translate library failures (Redis, JWT) into these types at their
boundary so the admission engine and HTTP layer never depend on third-party
exception classes.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    hint: str
    operation: str
    key_hash: str
    reason: str


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when input/config validation fails."""


class AuthenticationAppError(AppError):
    """Raised when authentication/authorization fails."""


class CredentialValidationError(AuthenticationAppError):
    """Raised when a quota credential is malformed, expired or forged."""


class CounterStoreError(AppError):
    """Raised when a counter store operation fails (I/O, parse, missing key)."""


class RateLimitExceededError(AppError):
    """Raised by the request interceptor when admission is denied."""

"""Response models for the credential endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class TokenResponse(BaseModel):
    """A freshly issued quota credential."""

    token: str = Field(..., description="Signed credential to send in the credential header")
    subject: str = Field(..., description="Subject the credential was issued to")
    max_requests: int = Field(..., description="Requests allowed per window")
    window_seconds: int = Field(..., description="Window length in seconds")
    expires_at: datetime = Field(..., description="Credential expiration instant (UTC)")


class DecodedTokenResponse(BaseModel):
    """Verified contents of a presented credential."""

    valid: bool = Field(True, description="Always true; invalid credentials yield 401")
    subject: str
    max_requests: int
    window_seconds: int
    issued_at: datetime
    expires_at: datetime

"""Credential issuance and inspection endpoints.

Neither endpoint is rate limited: issuing or decoding a credential does not
consume the quota it describes.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Query, Request

from quotagate.adapters.credentials.jwt_authority import JwtCredentialAuthority
from quotagate.core.errors import CredentialValidationError
from quotagate.core.quota import MAX_REQUESTS, MAX_WINDOW_SECONDS
from quotagate.core.rate_limit import extract_credential
from quotagate.schemas.token import DecodedTokenResponse, TokenResponse

router = APIRouter(prefix="/token", tags=["Credentials"])


def _authority(request: Request) -> JwtCredentialAuthority:
    return request.app.state.credential_authority


@router.get("", response_model=TokenResponse)
async def issue_token(
    request: Request,
    max_requests: Annotated[int, Query(alias="max", gt=0, le=MAX_REQUESTS, description="Requests allowed per window")],
    window_seconds: Annotated[int, Query(alias="interval", gt=0, le=MAX_WINDOW_SECONDS, description="Window length in seconds")],
    subject: Annotated[str | None, Query(description="Subject embedded in the credential")] = None,
) -> TokenResponse:
    """Issue a signed credential carrying its own quota.

    Raises:
        HTTPException: 422 if ``max`` or ``interval`` is missing or not a
            positive integer within the supported range.
    """
    auth_settings = request.app.state.settings.auth
    lifetime = timedelta(minutes=auth_settings.token_lifetime_minutes)
    resolved_subject = subject or auth_settings.default_subject

    token = _authority(request).issue(
        resolved_subject,
        max_requests=max_requests,
        window_seconds=window_seconds,
        lifetime=lifetime,
    )
    claims = _authority(request).validate(token)

    return TokenResponse(
        token=token,
        subject=claims.subject,
        max_requests=claims.quota.max_requests,
        window_seconds=claims.quota.window_seconds,
        expires_at=claims.expires_at,
    )


@router.get("/decode", response_model=DecodedTokenResponse)
async def decode_token(request: Request) -> DecodedTokenResponse:
    """Verify the credential header and return the quota it grants.

    Raises:
        CredentialValidationError: 401 when the header is missing or the
            credential is malformed, expired or forged.
    """
    header_name = request.app.state.settings.rate_limit.credential_header
    credential = extract_credential(request, header_name)
    if not credential:
        raise CredentialValidationError(
            code="credential_missing",
            message=f"Missing credential. Provide the {header_name} header.",
        )

    claims = _authority(request).validate(credential)
    return DecodedTokenResponse(
        subject=claims.subject,
        max_requests=claims.quota.max_requests,
        window_seconds=claims.quota.window_seconds,
        issued_at=claims.issued_at,
        expires_at=claims.expires_at,
    )

"""FastAPI router for session token endpoints."""

from typing import Annotated

import httpx
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from crm_gateway.dependencies import get_http_client
from crm_gateway.ratelimit import rate_limit_dependency

from .dependencies import get_authenticator
from .exceptions import BadRequestError, CRMGatewayError
from .schemas import RefreshRequest, SessionResponse, ValidateKeyRequest, ValidateKeyResponse
from .service import REQUIRED_SCOPES, SessionAuthenticator


router = APIRouter(prefix="/auth", tags=["auth"], dependencies=[Depends(rate_limit_dependency)])


def _invalid_response(exc: CRMGatewayError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"valid": False, **exc.to_content()},
    )


@router.post("/validate", response_model=ValidateKeyResponse)
async def validate_api_key(
    request: ValidateKeyRequest,
    authenticator: Annotated[SessionAuthenticator, Depends(get_authenticator)],
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
):
    """Exchange a vendor API key for a short-lived session token.

    The key is checked live against the CRM service before a token is
    minted. Failures return ``{"valid": false, "error": ...}``.
    """
    try:
        if not request.api_key:
            raise BadRequestError("API key is required", code="API_KEY_REQUIRED")
        if not request.location_id:
            raise BadRequestError("Location ID is required", code="LOCATION_ID_REQUIRED")

        grant = await authenticator.issue_session(client, request.api_key, request.location_id)
    except CRMGatewayError as exc:
        return _invalid_response(exc)

    return ValidateKeyResponse(
        session_token=grant.session_token,
        expires_in=grant.expires_in,
        location_id=grant.location_id,
    )


@router.post("/refresh", response_model=SessionResponse)
async def refresh_session_token(
    request: RefreshRequest,
    authenticator: Annotated[SessionAuthenticator, Depends(get_authenticator)],
) -> SessionResponse:
    """Refresh a valid session token. Expired and invalid tokens get 401."""
    if not request.session_token:
        raise BadRequestError("Session token is required", code="SESSION_TOKEN_REQUIRED")

    grant = authenticator.refresh_session(request.session_token)
    return SessionResponse(
        session_token=grant.session_token,
        expires_in=grant.expires_in,
        location_id=grant.location_id,
    )


@router.get("/requirements")
async def api_key_requirements() -> dict:
    """Describe the API key format, scopes and onboarding steps."""
    return {
        "apiKeyFormat": 'Private Integration Token (PIT) starting with "pit-"',
        "requiredScopes": [*REQUIRED_SCOPES, "View Custom Fields", "View Locations"],
        "optionalScopes": [
            "View Opportunities",
            "Edit Opportunities",
            "View Payment Orders",
            "View Payment Transactions",
        ],
        "instructions": {
            "step1": "Go to Settings > Private Integrations in your CRM location",
            "step2": 'Click "Create New Integration"',
            "step3": "Select the required scopes listed above",
            "step4": "Copy the generated PIT token",
            "step5": "Use the token with this API for authentication",
        },
    }

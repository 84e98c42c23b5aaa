"""Request/response schemas for the auth endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ValidateKeyRequest(BaseModel):
    """Body of ``POST /auth/validate``.

    Fields are optional so missing values produce the gateway's own 400
    errors instead of a framework validation error.
    """

    model_config = ConfigDict(populate_by_name=True)

    # left untyped so the format check reports non-string keys
    api_key: Any = Field(default=None, alias="apiKey")
    location_id: str | None = Field(default=None, alias="locationId")


class RefreshRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_token: str | None = Field(default=None, alias="sessionToken")


class SessionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_token: str = Field(..., alias="sessionToken")
    expires_in: str = Field(..., alias="expiresIn")
    location_id: str = Field(..., alias="locationId")


class ValidateKeyResponse(SessionResponse):
    valid: bool = True
    message: str = "API key validated successfully"

"""Pydantic models for session claims and authenticated clients."""

from datetime import datetime
from enum import Enum
from typing import NamedTuple

from pydantic import BaseModel, Field

from .exceptions import AuthenticationError


class SessionClaims(BaseModel):
    """Claims carried by a gateway session token.

    Attributes:
        location_id: Tenant (CRM location) the session is bound to.
        credential_fingerprint: One-way digest of the vendor API key.
        issued_at: When the token was minted (UTC).
    """

    location_id: str = Field(..., description="CRM location identifier")
    credential_fingerprint: str = Field(..., description="Truncated SHA-256 of the API key")
    issued_at: datetime = Field(..., description="Issue time (UTC)")


class AuthMethod(str, Enum):
    """Credential transport that authenticated a request."""

    session_token = "session_token"
    api_key_header = "api_key_header"
    bearer = "bearer"


class AuthenticatedClient(BaseModel):
    """Represents a caller that passed one of the authentication strategies.

    Attributes:
        method: Which strategy authenticated the request.
        credential: Raw vendor API key, when one is available for this request.
        location_id: Location bound by a session token (None for raw keys).
        credential_fingerprint: Fingerprint of the vendor API key.
    """

    method: AuthMethod
    credential: str | None = Field(default=None, repr=False)
    location_id: str | None = None
    credential_fingerprint: str | None = None


class AuthStatus(str, Enum):
    authenticated = "authenticated"
    inapplicable = "inapplicable"
    rejected = "rejected"


class AuthOutcome(NamedTuple):
    """Result of a single strategy attempt."""

    status: AuthStatus
    client: AuthenticatedClient | None = None
    error: AuthenticationError | None = None

    @classmethod
    def authenticated(cls, client: AuthenticatedClient) -> "AuthOutcome":
        return cls(status=AuthStatus.authenticated, client=client)

    @classmethod
    def inapplicable(cls) -> "AuthOutcome":
        return cls(status=AuthStatus.inapplicable)

    @classmethod
    def rejected(cls, error: AuthenticationError) -> "AuthOutcome":
        return cls(status=AuthStatus.rejected, error=error)


class SessionGrant(BaseModel):
    """A freshly minted session token and its metadata."""

    session_token: str
    expires_in: str
    location_id: str

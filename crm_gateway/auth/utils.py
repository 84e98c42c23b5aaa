"""Session token and API key utilities."""

import hashlib
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from ..config import Settings, get_settings
from .exceptions import (
    ExpiredSessionTokenError,
    InvalidSessionTokenError,
    MalformedCredentialError,
)
from .models import SessionClaims


API_KEY_PREFIX = "pit-"
API_KEY_MIN_LENGTH = 10
FINGERPRINT_LENGTH = 16


def validate_api_key_format(api_key: object) -> None:
    """Check the surface format of a Private Integration Token.

    Passing this check does not mean the CRM service accepts the key.

    Raises:
        MalformedCredentialError: If the key is empty, not a string, lacks
            the ``pit-`` prefix, or is too short.
    """
    if not api_key:
        raise MalformedCredentialError("API key is required")
    if not isinstance(api_key, str):
        raise MalformedCredentialError("API key must be a string")
    if not api_key.startswith(API_KEY_PREFIX):
        raise MalformedCredentialError(
            "Invalid API key format. Must be a Private Integration Token (PIT)"
        )
    if len(api_key) < API_KEY_MIN_LENGTH:
        raise MalformedCredentialError("API key appears to be too short")


def fingerprint_credential(api_key: str) -> str:
    """Return a non-reversible fingerprint of a vendor API key."""
    return hashlib.sha256(api_key.encode("utf-8")).hexdigest()[:FINGERPRINT_LENGTH]


def create_session_token(
    location_id: str,
    credential_fingerprint: str,
    issued_at: datetime | None = None,
    settings: Settings | None = None,
) -> str:
    """Mint a signed session token.

    Args:
        location_id: Location the session is bound to.
        credential_fingerprint: Fingerprint of the validated API key.
        issued_at: Issue time; defaults to now. Must not be in the future.
        settings: Settings override (uses cached settings if not provided).

    Returns:
        Encoded JWT string.
    """
    settings = settings or get_settings()
    now = datetime.now(timezone.utc)
    if issued_at is None:
        issued_at = now
    if issued_at > now:
        raise ValueError("session token cannot be issued in the future")

    expires_at = issued_at + timedelta(hours=settings.SESSION_TOKEN_TTL_HOURS)
    payload = {
        "locationId": location_id,
        "fingerprint": credential_fingerprint,
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(payload, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_session_token(token: str, settings: Settings | None = None) -> SessionClaims:
    """Verify a session token's signature and expiry and extract its claims.

    Raises:
        ExpiredSessionTokenError: If the token has expired.
        InvalidSessionTokenError: If the token is malformed, badly signed, or
            missing claims.
    """
    settings = settings or get_settings()
    if not token:
        raise InvalidSessionTokenError("Session token is empty")

    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            options={"verify_signature": True, "verify_exp": True, "require_exp": True},
        )
    except jwt.ExpiredSignatureError as e:
        raise ExpiredSessionTokenError() from e
    except JWTError as e:
        raise InvalidSessionTokenError(f"Invalid session token: {e}") from e

    location_id = payload.get("locationId")
    fingerprint = payload.get("fingerprint")
    issued_at = payload.get("iat")
    if not location_id or not fingerprint or issued_at is None:
        raise InvalidSessionTokenError("Session token missing required claims")

    try:
        issued = datetime.fromtimestamp(int(issued_at), tz=timezone.utc)
    except (TypeError, ValueError) as e:
        raise InvalidSessionTokenError("Session token has invalid 'iat' claim") from e

    return SessionClaims(
        location_id=str(location_id),
        credential_fingerprint=str(fingerprint),
        issued_at=issued,
    )


def session_ttl_label(settings: Settings | None = None) -> str:
    """Human-readable token lifetime, e.g. ``"24h"``."""
    settings = settings or get_settings()
    return f"{settings.SESSION_TOKEN_TTL_HOURS}h"

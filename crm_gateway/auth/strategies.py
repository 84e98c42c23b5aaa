"""Authentication strategies, tried in a fixed priority order."""

from typing import Mapping

import structlog

from ..config import Settings, get_settings
from .exceptions import AuthenticationError
from .models import AuthenticatedClient, AuthMethod, AuthOutcome
from .utils import decode_session_token, fingerprint_credential, validate_api_key_format

logger = structlog.get_logger("auth")

SESSION_TOKEN_HEADER = "x-session-token"
API_KEY_HEADER = "x-api-key"
AUTHORIZATION_HEADER = "authorization"
BEARER_PREFIX = "Bearer "


def bearer_credential(headers: Mapping[str, str]) -> str | None:
    value = headers.get(AUTHORIZATION_HEADER)
    if value and value.startswith(BEARER_PREFIX):
        return value[len(BEARER_PREFIX):]
    return None


class AuthStrategy:
    """Base class for authentication strategies.

    A strategy inspects request headers and returns an AuthOutcome:
    authenticated, inapplicable (try the next strategy), or rejected
    (stop and fail the request).
    """

    method: AuthMethod

    def try_authenticate(self, headers: Mapping[str, str]) -> AuthOutcome:
        raise NotImplementedError


class SessionTokenStrategy(AuthStrategy):
    """Verifies a gateway-issued session token.

    Any verification failure falls through to the next strategy. When the
    request also carries a raw API key (or the server holds one) whose
    fingerprint matches the session, it is attached for downstream calls.
    """

    method = AuthMethod.session_token

    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def try_authenticate(self, headers: Mapping[str, str]) -> AuthOutcome:
        token = headers.get(SESSION_TOKEN_HEADER)
        if not token:
            return AuthOutcome.inapplicable()

        try:
            claims = decode_session_token(token, self.settings)
        except AuthenticationError as e:
            logger.info("session_token_fallthrough", reason=e.code)
            return AuthOutcome.inapplicable()

        return AuthOutcome.authenticated(AuthenticatedClient(
            method=self.method,
            credential=self._matching_credential(headers, claims.credential_fingerprint),
            location_id=claims.location_id,
            credential_fingerprint=claims.credential_fingerprint,
        ))

    def _matching_credential(self, headers: Mapping[str, str], fingerprint: str) -> str | None:
        candidates = [
            headers.get(API_KEY_HEADER),
            bearer_credential(headers),
            self.settings.CRM_API_KEY,
        ]
        for candidate in candidates:
            if candidate and fingerprint_credential(candidate) == fingerprint:
                return candidate
        return None


class _RawCredentialStrategy(AuthStrategy):
    """Shared logic for strategies that receive a raw vendor API key."""

    def extract(self, headers: Mapping[str, str]) -> str | None:
        raise NotImplementedError

    def try_authenticate(self, headers: Mapping[str, str]) -> AuthOutcome:
        api_key = self.extract(headers)
        if not api_key:
            return AuthOutcome.inapplicable()

        try:
            validate_api_key_format(api_key)
        except AuthenticationError as e:
            return AuthOutcome.rejected(e)

        return AuthOutcome.authenticated(AuthenticatedClient(
            method=self.method,
            credential=api_key,
            credential_fingerprint=fingerprint_credential(api_key),
        ))


class ApiKeyHeaderStrategy(_RawCredentialStrategy):
    """Raw API key in the ``x-api-key`` header."""

    method = AuthMethod.api_key_header

    def extract(self, headers: Mapping[str, str]) -> str | None:
        return headers.get(API_KEY_HEADER)


class BearerStrategy(_RawCredentialStrategy):
    """Raw API key in ``Authorization: Bearer <key>``."""

    method = AuthMethod.bearer

    def extract(self, headers: Mapping[str, str]) -> str | None:
        return bearer_credential(headers)


def default_strategies(settings: Settings | None = None) -> list[AuthStrategy]:
    """Strategies in their documented priority order."""
    return [
        SessionTokenStrategy(settings),
        ApiKeyHeaderStrategy(),
        BearerStrategy(),
    ]

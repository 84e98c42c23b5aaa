"""Session authenticator: strategy pipeline, issuance and refresh."""

import time
from typing import Mapping

import httpx
import structlog

from ..config import Settings, get_settings
from .exceptions import (
    CredentialCheckFailedError,
    CredentialRejectedError,
    InsufficientScopeError,
    MissingCredentialsError,
)
from .models import AuthenticatedClient, AuthStatus, SessionGrant
from .strategies import AuthStrategy, default_strategies
from .utils import (
    create_session_token,
    decode_session_token,
    fingerprint_credential,
    session_ttl_label,
    validate_api_key_format,
)

logger = structlog.get_logger("auth")


# Scopes the CRM service expects for the supported tool categories
REQUIRED_SCOPES = [
    "View Contacts",
    "Edit Contacts",
    "View Conversations",
    "Edit Conversations",
    "View Conversation Messages",
    "Edit Conversation Messages",
    "View Calendars",
    "Edit Calendars",
    "View Calendar Events",
    "Edit Calendar Events",
]


class SessionAuthenticator:
    """Authenticates requests and manages gateway session tokens.

    Strategies run in order; the first one that authenticates or rejects
    the request decides the outcome. Tokens are verified purely by
    signature, so no server-side session store exists.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        strategies: list[AuthStrategy] | None = None,
    ):
        self.settings = settings or get_settings()
        self.strategies = strategies if strategies is not None else default_strategies(self.settings)

    def authenticate(self, headers: Mapping[str, str]) -> AuthenticatedClient:
        """Run the strategy pipeline against request headers.

        Raises:
            AuthenticationError: The rejecting strategy's error, or
                MissingCredentialsError if no strategy applied.
        """
        for strategy in self.strategies:
            outcome = strategy.try_authenticate(headers)
            if outcome.status == AuthStatus.authenticated:
                return outcome.client
            if outcome.status == AuthStatus.rejected:
                logger.info("auth_rejected", method=strategy.method.value, reason=outcome.error.code)
                raise outcome.error
        raise MissingCredentialsError()

    async def verify_credential(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        location_id: str,
    ) -> dict:
        """Check an API key against the CRM service's location endpoint.

        Returns:
            The location payload returned by the CRM service.

        Raises:
            CredentialRejectedError: CRM answered 401.
            InsufficientScopeError: CRM answered 403.
            CredentialCheckFailedError: Any other failure.
        """
        url = f"{self.settings.CRM_API_BASE_URL.rstrip('/')}/locations/{location_id}"
        start = time.perf_counter()
        try:
            response = await client.get(
                url,
                headers={
                    "Authorization": f"Bearer {api_key}",
                    "Content-Type": "application/json",
                },
                timeout=self.settings.CREDENTIAL_CHECK_TIMEOUT_SECONDS,
            )
        except httpx.RequestError as e:
            logger.warning("credential_check_unreachable", location_id=location_id, error=str(e))
            raise CredentialCheckFailedError(detail=str(e)) from e

        duration_ms = int((time.perf_counter() - start) * 1000)
        if response.status_code >= 400:
            logger.info(
                "credential_check_failed",
                location_id=location_id,
                status=response.status_code,
                duration_ms=duration_ms,
            )
            if response.status_code == 401:
                raise CredentialRejectedError()
            if response.status_code == 403:
                raise InsufficientScopeError(list(REQUIRED_SCOPES))
            raise CredentialCheckFailedError(detail=_response_body(response))

        return _response_body(response)

    async def issue_session(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        location_id: str,
    ) -> SessionGrant:
        """Validate an API key live and mint a session token for it."""
        validate_api_key_format(api_key)
        await self.verify_credential(client, api_key, location_id)

        fingerprint = fingerprint_credential(api_key)
        token = create_session_token(location_id, fingerprint, settings=self.settings)
        logger.info("session_issued", location_id=location_id, fingerprint=fingerprint)
        return SessionGrant(
            session_token=token,
            expires_in=session_ttl_label(self.settings),
            location_id=location_id,
        )

    def refresh_session(self, token: str) -> SessionGrant:
        """Mint a new token with the same location and fingerprint.

        Raises:
            ExpiredSessionTokenError: If the token has expired.
            InvalidSessionTokenError: If the token is otherwise invalid.
        """
        claims = decode_session_token(token, self.settings)
        new_token = create_session_token(
            claims.location_id,
            claims.credential_fingerprint,
            settings=self.settings,
        )
        logger.info("session_refreshed", location_id=claims.location_id)
        return SessionGrant(
            session_token=new_token,
            expires_in=session_ttl_label(self.settings),
            location_id=claims.location_id,
        )


def _response_body(response: httpx.Response):
    try:
        return response.json()
    except ValueError:
        return response.text

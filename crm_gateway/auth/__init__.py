"""Auth module initialization."""

from .exceptions import (
    CRMGatewayError,
    BadRequestError,
    InternalError,
    AuthenticationError,
    MissingCredentialsError,
    MalformedCredentialError,
    InvalidSessionTokenError,
    ExpiredSessionTokenError,
    CredentialRejectedError,
    CredentialCheckFailedError,
    AuthorizationError,
    InsufficientScopeError,
    LocationMismatchError,
)
from .models import SessionClaims, AuthenticatedClient, AuthMethod, AuthOutcome, AuthStatus, SessionGrant
from .utils import (
    validate_api_key_format,
    fingerprint_credential,
    create_session_token,
    decode_session_token,
)
from .strategies import (
    AuthStrategy,
    SessionTokenStrategy,
    ApiKeyHeaderStrategy,
    BearerStrategy,
    default_strategies,
)
from .service import SessionAuthenticator
from .dependencies import get_authenticator, get_authenticated_client

__all__ = [
    # Exceptions
    "CRMGatewayError",
    "BadRequestError",
    "InternalError",
    "AuthenticationError",
    "MissingCredentialsError",
    "MalformedCredentialError",
    "InvalidSessionTokenError",
    "ExpiredSessionTokenError",
    "CredentialRejectedError",
    "CredentialCheckFailedError",
    "AuthorizationError",
    "InsufficientScopeError",
    "LocationMismatchError",
    # Models
    "SessionClaims",
    "AuthenticatedClient",
    "AuthMethod",
    "AuthOutcome",
    "AuthStatus",
    "SessionGrant",
    # Utils
    "validate_api_key_format",
    "fingerprint_credential",
    "create_session_token",
    "decode_session_token",
    # Strategies
    "AuthStrategy",
    "SessionTokenStrategy",
    "ApiKeyHeaderStrategy",
    "BearerStrategy",
    "default_strategies",
    # Service
    "SessionAuthenticator",
    # Dependencies
    "get_authenticator",
    "get_authenticated_client",
]

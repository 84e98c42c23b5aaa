"""Custom exceptions for authentication and authorization."""

from typing import Any


class CRMGatewayError(Exception):
    """Base exception for all CRM Gateway errors.

    Every subclass carries the HTTP status it maps to and optional
    structured details that are merged into the JSON error body.
    """

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_content(self) -> dict[str, Any]:
        """Render the error as a JSON-serializable body."""
        return {"error": self.code, "message": self.message, **self.details}


class BadRequestError(CRMGatewayError):
    """Raised when a request is missing a required field."""

    status_code = 400

    def __init__(self, message: str, code: str = "BAD_REQUEST", details: dict[str, Any] | None = None):
        super().__init__(message=message, code=code, details=details)


class InternalError(CRMGatewayError):
    """Generic server-side failure. Only the message is exposed."""

    status_code = 500

    def __init__(self, message: str = "Internal server error", code: str = "INTERNAL_ERROR"):
        super().__init__(message=message, code=code)


class AuthenticationError(CRMGatewayError):
    """Raised when authentication fails.

    Attributes:
        kind: Machine-readable failure kind (missing, malformed, expired,
            invalid, rejected).
    """

    status_code = 401
    kind = "invalid"

    def to_content(self) -> dict[str, Any]:
        return {**super().to_content(), "kind": self.kind}


AUTHENTICATION_METHODS = [
    "Session token in x-session-token header",
    "API key in x-api-key header",
    "API key in Authorization: Bearer header",
]


class MissingCredentialsError(AuthenticationError):
    """Raised when a request carries no usable credential material."""

    kind = "missing"

    def __init__(self, message: str = "Authentication required"):
        super().__init__(
            message=message,
            code="AUTHENTICATION_REQUIRED",
            details={"methods": list(AUTHENTICATION_METHODS)},
        )


class MalformedCredentialError(AuthenticationError):
    """Raised when a vendor API key fails the surface format check."""

    status_code = 400
    kind = "malformed"

    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_API_KEY_FORMAT")


class InvalidSessionTokenError(AuthenticationError):
    """Raised when a session token is malformed or its signature is bad."""

    kind = "invalid"

    def __init__(self, message: str = "Invalid session token"):
        super().__init__(message=message, code="INVALID_SESSION_TOKEN")


class ExpiredSessionTokenError(AuthenticationError):
    """Raised when a session token is past its expiry."""

    kind = "expired"

    def __init__(self, message: str = "Session token expired"):
        super().__init__(message=message, code="SESSION_TOKEN_EXPIRED")


class CredentialRejectedError(AuthenticationError):
    """Raised when the CRM service refuses a well-formed API key."""

    kind = "rejected"

    def __init__(self, message: str = "Invalid API key or insufficient permissions"):
        super().__init__(message=message, code="CREDENTIAL_REJECTED")


class CredentialCheckFailedError(CRMGatewayError):
    """Raised when the live credential check fails for another reason."""

    status_code = 400

    def __init__(self, detail: Any = None):
        super().__init__(
            message="Failed to validate API key",
            code="CREDENTIAL_CHECK_FAILED",
            details={"details": detail},
        )


class AuthorizationError(CRMGatewayError):
    """Raised when a client lacks permission for an action."""

    status_code = 403


class InsufficientScopeError(AuthorizationError):
    """Raised when the CRM service reports the API key lacks scopes."""

    def __init__(self, required_scopes: list[str]):
        super().__init__(
            message="API key does not have required scopes",
            code="INSUFFICIENT_SCOPE",
            details={"requiredScopes": required_scopes},
        )
        self.required_scopes = required_scopes


class LocationMismatchError(AuthorizationError):
    """Raised when a session token is used for a different location."""

    def __init__(self, session_location: str, requested_location: str):
        super().__init__(
            message=f"Session is bound to location '{session_location}', not '{requested_location}'",
            code="LOCATION_MISMATCH",
        )
        self.session_location = session_location
        self.requested_location = requested_location

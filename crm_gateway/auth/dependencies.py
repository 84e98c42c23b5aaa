"""FastAPI dependencies for authentication."""

from typing import Annotated

from fastapi import Depends, Request

from .models import AuthenticatedClient
from .service import SessionAuthenticator


async def get_authenticator(request: Request) -> SessionAuthenticator:
    """Return the app-wide SessionAuthenticator created at startup."""
    return request.app.state.authenticator


async def get_authenticated_client(
    request: Request,
    authenticator: Annotated[SessionAuthenticator, Depends(get_authenticator)],
) -> AuthenticatedClient:
    """Authenticate the current request from its headers.

    Raises:
        AuthenticationError: If no strategy authenticates the request.
    """
    return authenticator.authenticate(request.headers)

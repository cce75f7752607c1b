"""FastAPI dependencies for session authentication.

Provides dependency functions that extract the session token from the
Authorization header and run the access guard for the endpoint.
"""

from typing import Annotated

from fastapi import Header

from koperasi_storefront.auth.access_guard import AccessGuard
from koperasi_storefront.models.auth_models import Actor


def get_session_token_from_header(
    authorization: Annotated[str | None, Header()] = None,
) -> str | None:
    """FastAPI dependency to extract the session secret from a bearer header.

    Args:
        authorization: Value of the Authorization header (injected by FastAPI)

    Returns:
        The session token, or None if the header is absent or not a bearer token
    """
    if not authorization:
        return None

    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None

    return token.strip()


async def require_actor(guard: AccessGuard, session_token: str | None) -> Actor:
    """Authenticated-only pages: session check.

    Raises:
        AuthRequired: If there is no valid session
    """
    return await guard.authenticate(session_token)


async def require_admin(guard: AccessGuard, session_token: str | None) -> Actor:
    """Admin pages: session check followed by a role lookup.

    Raises:
        AuthRequired: If there is no valid session
        PermissionDenied: If the actor is not an admin
    """
    return await guard.authorize_admin(session_token)

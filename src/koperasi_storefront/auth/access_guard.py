"""Access guard deciding whether an actor may use a page or endpoint.

There is exactly one privileged role. The guard runs on every request and does
not cache the admin determination, so each admin request costs one role
lookup.
"""

import asyncio
import logging

from koperasi_storefront.backend.session_client import SessionClient
from koperasi_storefront.exceptions import AuthRequired, PermissionDenied
from koperasi_storefront.models.auth_models import ADMIN_ROLE, Actor
from koperasi_storefront.observability.metrics import record_access_denied
from koperasi_storefront.repositories.account_repositories import RoleRepository

logger = logging.getLogger(__name__)


class AccessGuard:
    """Checks sessions and the admin role assignment."""

    def __init__(self, session_client: SessionClient, role_repository: RoleRepository) -> None:
        """Initialize the guard.

        Args:
            session_client: Client of the hosted session service
            role_repository: Role assignment lookup
        """
        self.session_client = session_client
        self.role_repository = role_repository

    async def authenticate(self, session_token: str | None) -> Actor:
        """Resolve the actor behind a session token.

        Args:
            session_token: Session secret presented by the client

        Returns:
            Actor: The authenticated actor

        Raises:
            AuthRequired: If there is no valid session
            BackendError: If the session service is unavailable
        """
        actor = await self.session_client.get_current_session(session_token)
        if actor is None:
            record_access_denied("auth_required")
            raise AuthRequired()
        return actor

    async def is_admin(self, actor: Actor) -> bool:
        """Check whether an actor holds the admin role.

        Args:
            actor: Authenticated actor

        Returns:
            bool: True if a (user_id, admin) role assignment exists
        """
        return await asyncio.to_thread(self.role_repository.has_role, actor.id, ADMIN_ROLE)

    async def authorize_admin(self, session_token: str | None) -> Actor:
        """Require an authenticated admin.

        Args:
            session_token: Session secret presented by the client

        Returns:
            Actor: The authenticated admin

        Raises:
            AuthRequired: If there is no valid session
            PermissionDenied: If the actor is not an admin
        """
        actor = await self.authenticate(session_token)
        if not await self.is_admin(actor):
            logger.warning(f"Non-admin actor {actor.id} denied access to admin area")
            record_access_denied("permission_denied")
            raise PermissionDenied()
        return actor

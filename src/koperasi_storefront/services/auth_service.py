"""Login, logout and registration against the hosted session service."""

import asyncio
import logging
from dataclasses import dataclass

from koperasi_storefront.auth.access_guard import AccessGuard
from koperasi_storefront.backend.session_client import SessionClient
from koperasi_storefront.exceptions import BackendError
from koperasi_storefront.models.auth_models import Actor, Profile, Session
from koperasi_storefront.observability import traced
from koperasi_storefront.repositories.account_repositories import ProfileRepository

logger = logging.getLogger(__name__)

ADMIN_HOME = "/admin"
STUDENT_HOME = "/menu"


@dataclass
class LoginResult:
    """Outcome of a successful login or registration.

    Attributes:
        session: The created session; its secret is the bearer token
        actor: The logged-in actor
        is_admin: Whether the actor holds the admin role
        redirect_to: Landing page for the actor
    """

    session: Session
    actor: Actor
    is_admin: bool
    redirect_to: str


class AuthService:
    """Session lifecycle for students and admins."""

    def __init__(
        self,
        session_client: SessionClient,
        access_guard: AccessGuard,
        profile_repository: ProfileRepository,
    ) -> None:
        self.session_client = session_client
        self.access_guard = access_guard
        self.profile_repository = profile_repository

    @traced("login")
    async def login(self, email: str, password: str) -> LoginResult:
        """Create a session and decide where the actor lands.

        Admins land on the dashboard, everyone else on the menu.

        Raises:
            AuthenticationError: If the credentials are rejected
            BackendError: If the session service cannot be reached
        """
        session = await self.session_client.create_session(email, password)
        actor = await self.session_client.get_current_session(session.secret)
        if actor is None:
            logger.error(f"Session {session.id} was created but could not be resolved")
            raise BackendError()

        is_admin = await self.access_guard.is_admin(actor)
        logger.info(f"Actor {actor.id} logged in (admin={is_admin})")
        return LoginResult(
            session=session,
            actor=actor,
            is_admin=is_admin,
            redirect_to=ADMIN_HOME if is_admin else STUDENT_HOME,
        )

    async def logout(self, session_token: str) -> bool:
        """Revoke the current session. Returns False if the service refused."""
        return await self.session_client.destroy_session(session_token)

    @traced("register")
    async def register(
        self, email: str, password: str, full_name: str, phone: str | None = None
    ) -> LoginResult:
        """Create an account, log it in and store the student profile.

        Raises:
            AuthenticationError: If the account cannot be created
            BackendError: If the session service or document store fails
        """
        actor = await self.session_client.create_account(email, password, full_name)
        session = await self.session_client.create_session(email, password)

        profile = Profile(user_id=actor.id, full_name=full_name, phone=phone)
        await asyncio.to_thread(self.profile_repository.create_profile, profile)

        logger.info(f"Registered actor {actor.id}")
        return LoginResult(session=session, actor=actor, is_admin=False, redirect_to=STUDENT_HOME)

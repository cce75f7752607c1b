"""Client for the hosted backend's session (account) service."""

import logging
from typing import Any

import httpx

from koperasi_storefront.exceptions import AuthenticationError, BackendError
from koperasi_storefront.models.auth_models import Actor, Session

logger = logging.getLogger(__name__)


class SessionClient:
    """HTTP client for the hosted account API.

    Sessions are identified by their secret, which the storefront receives as a
    bearer token and forwards on every call that acts on behalf of the actor.
    """

    def __init__(self, endpoint: str, project_id: str, timeout_seconds: float = 10.0) -> None:
        """Initialize the session client.

        Args:
            endpoint: Base URL of the hosted backend API (e.g., "https://cloud.example.com/v1")
            project_id: Project identifier sent with every request
            timeout_seconds: Per-request timeout
        """
        self.endpoint = endpoint.rstrip("/")
        self.project_id = project_id
        self.timeout_seconds = timeout_seconds

    def _headers(self, session_token: str | None = None) -> dict[str, str]:
        headers = {"X-Appwrite-Project": self.project_id}
        if session_token:
            headers["X-Appwrite-Session"] = session_token
        return headers

    async def get_current_session(self, session_token: str | None) -> Actor | None:
        """Resolve the actor behind a session token.

        Args:
            session_token: Session secret presented by the client

        Returns:
            Actor if the session is valid, None if the token is absent or rejected

        Raises:
            BackendError: If the session service fails or returns an unusable account
        """
        if not session_token:
            return None

        url = f"{self.endpoint}/account"

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.get(url, headers=self._headers(session_token))
                response.raise_for_status()
                data = response.json()

                return Actor(id=data["$id"], email=data.get("email"), name=data.get("name"))

        except httpx.HTTPStatusError as e:
            if e.response.status_code == 401:
                return None
            logger.error(f"Failed to resolve current session: {e}")
            raise BackendError() from e
        except httpx.RequestError as e:
            logger.error(f"Session service unreachable: {e}")
            raise BackendError() from e
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Malformed account returned by session service: {e}")
            raise BackendError() from e

    async def create_session(self, email: str, password: str) -> Session:
        """Log in with email and password.

        Args:
            email: Account email
            password: Account password

        Returns:
            The newly created session

        Raises:
            AuthenticationError: If the credentials are rejected
            BackendError: If the session service cannot be reached
        """
        url = f"{self.endpoint}/account/sessions/email"
        payload = {"email": email, "password": password}

        data = await self._post(url, payload, failure_message="Invalid email or password")
        return Session(id=data["$id"], user_id=data["userId"], secret=data["secret"])

    async def create_account(self, email: str, password: str, name: str) -> Actor:
        """Register a new account.

        Args:
            email: Account email
            password: Account password
            name: Display name

        Returns:
            The created actor

        Raises:
            AuthenticationError: If the account cannot be created (e.g. email taken)
            BackendError: If the session service cannot be reached
        """
        url = f"{self.endpoint}/account"
        payload = {"userId": "unique()", "email": email, "password": password, "name": name}

        data = await self._post(url, payload, failure_message="Registration failed")
        return Actor(id=data["$id"], email=data.get("email"), name=data.get("name"))

    async def destroy_session(self, session_token: str) -> bool:
        """Log out the current session.

        Args:
            session_token: Session secret to revoke

        Returns:
            True if the session was revoked, False otherwise
        """
        url = f"{self.endpoint}/account/sessions/current"

        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.delete(url, headers=self._headers(session_token))
                response.raise_for_status()
                return True

        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            logger.warning(f"Failed to destroy session: {e}")
            return False

    async def _post(self, url: str, payload: dict[str, Any], failure_message: str) -> dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
                response = await client.post(url, json=payload, headers=self._headers())
                response.raise_for_status()
                data: dict[str, Any] = response.json()
                return data

        except httpx.HTTPStatusError as e:
            if e.response.status_code < 500:
                # The service explains client errors (bad password, duplicate email)
                message = _error_message(e.response) or failure_message
                raise AuthenticationError(message) from e
            logger.error(f"Session service error on {url}: {e}")
            raise BackendError() from e
        except httpx.RequestError as e:
            logger.error(f"Session service unreachable: {e}")
            raise BackendError() from e


def _error_message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    message = body.get("message") if isinstance(body, dict) else None
    return message if isinstance(message, str) else None

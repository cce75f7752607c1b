"""Unit tests for SessionClient."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from koperasi_storefront.backend.session_client import SessionClient
from koperasi_storefront.exceptions import AuthenticationError, BackendError


def _response(status_code: int, json_data: object, method: str = "GET") -> httpx.Response:
    request = httpx.Request(method, "https://backend.test/v1/account")
    return httpx.Response(status_code, json=json_data, request=request)


@pytest.mark.unit
class TestSessionClient:
    """Test suite for SessionClient."""

    @pytest.fixture
    def client(self) -> SessionClient:
        """Create a SessionClient with test configuration."""
        return SessionClient(endpoint="https://backend.test/v1/", project_id="koperasi")

    def test_client_initialization(self, client: SessionClient) -> None:
        """Test that the endpoint is normalised."""
        assert client.endpoint == "https://backend.test/v1"
        assert client.project_id == "koperasi"

    @pytest.mark.asyncio
    async def test_get_current_session_success(self, client: SessionClient) -> None:
        """Test resolving a valid session."""
        response = _response(200, {"$id": "user_1", "email": "siti@kampus.ac.id", "name": "Siti"})

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=response) as mock_get:
            actor = await client.get_current_session("secret")

        assert actor is not None
        assert actor.id == "user_1"
        assert actor.email == "siti@kampus.ac.id"
        headers = mock_get.call_args.kwargs["headers"]
        assert headers == {"X-Appwrite-Project": "koperasi", "X-Appwrite-Session": "secret"}

    @pytest.mark.asyncio
    async def test_get_current_session_without_token(self, client: SessionClient) -> None:
        """Test that no request is made without a token."""
        with patch("httpx.AsyncClient.get", new_callable=AsyncMock) as mock_get:
            assert await client.get_current_session(None) is None

        mock_get.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_current_session_expired(self, client: SessionClient) -> None:
        """Test that a rejected session is treated as no session."""
        response = _response(401, {"message": "User (role: guests) missing scope"})

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=response):
            assert await client.get_current_session("expired") is None

    @pytest.mark.asyncio
    async def test_get_current_session_network_error(self, client: SessionClient) -> None:
        """Test that an unreachable service is a backend failure, not a missing session."""
        with patch(
            "httpx.AsyncClient.get",
            new_callable=AsyncMock,
            side_effect=httpx.ConnectError("Connection refused"),
        ):
            with pytest.raises(BackendError):
                await client.get_current_session("secret")

    @pytest.mark.asyncio
    async def test_get_current_session_server_error(self, client: SessionClient) -> None:
        """Test that a 5xx from the session service raises BackendError."""
        response = _response(503, {"message": "Service unavailable"})

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=response):
            with pytest.raises(BackendError):
                await client.get_current_session("secret")

    @pytest.mark.asyncio
    async def test_get_current_session_malformed_account(self, client: SessionClient) -> None:
        """Test that an account without an id raises BackendError."""
        response = _response(200, {"email": "siti@kampus.ac.id"})

        with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=response):
            with pytest.raises(BackendError):
                await client.get_current_session("secret")

    @pytest.mark.asyncio
    async def test_create_session_success(self, client: SessionClient) -> None:
        """Test logging in with email and password."""
        response = _response(
            201, {"$id": "sess_1", "userId": "user_1", "secret": "secret_1"}, method="POST"
        )

        with patch("httpx.AsyncClient.post", new_callable=AsyncMock, return_value=response) as mock_post:
            session = await client.create_session("siti@kampus.ac.id", "password123")

        assert session.id == "sess_1"
        assert session.user_id == "user_1"
        assert session.secret == "secret_1"
        assert mock_post.call_args.args[0] == "https://backend.test/v1/account/sessions/email"
        assert mock_post.call_args.kwargs["json"] == {
            "email": "siti@kampus.ac.id",
            "password": "password123",
        }

    @pytest.mark.asyncio
    async def test_create_session_bad_credentials(self, client: SessionClient) -> None:
        """Test that rejected credentials carry the service's message."""
        response = _response(401, {"message": "Invalid credentials"}, method="POST")

        with patch("httpx.AsyncClient.post", new_callable=AsyncMock, return_value=response):
            with pytest.raises(AuthenticationError) as exc_info:
                await client.create_session("siti@kampus.ac.id", "wrong")

        assert exc_info.value.message == "Invalid credentials"

    @pytest.mark.asyncio
    async def test_create_session_server_error(self, client: SessionClient) -> None:
        """Test that a service failure surfaces as BackendError."""
        response = _response(503, {"message": "Unavailable"}, method="POST")

        with patch("httpx.AsyncClient.post", new_callable=AsyncMock, return_value=response):
            with pytest.raises(BackendError):
                await client.create_session("siti@kampus.ac.id", "password123")

    @pytest.mark.asyncio
    async def test_create_account_duplicate_email(self, client: SessionClient) -> None:
        """Test registration with an email already in use."""
        response = _response(
            409, {"message": "A user with the same email already exists"}, method="POST"
        )

        with patch("httpx.AsyncClient.post", new_callable=AsyncMock, return_value=response):
            with pytest.raises(AuthenticationError) as exc_info:
                await client.create_account("siti@kampus.ac.id", "password123", "Siti")

        assert "already exists" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_create_account_success(self, client: SessionClient) -> None:
        """Test registering an account."""
        response = _response(201, {"$id": "user_1", "email": "siti@kampus.ac.id"}, method="POST")

        with patch("httpx.AsyncClient.post", new_callable=AsyncMock, return_value=response) as mock_post:
            actor = await client.create_account("siti@kampus.ac.id", "password123", "Siti")

        assert actor.id == "user_1"
        assert mock_post.call_args.kwargs["json"]["userId"] == "unique()"

    @pytest.mark.asyncio
    async def test_destroy_session(self, client: SessionClient) -> None:
        """Test logging out."""
        response = MagicMock()
        response.raise_for_status = MagicMock()

        with patch("httpx.AsyncClient.delete", new_callable=AsyncMock, return_value=response):
            assert await client.destroy_session("secret") is True

    @pytest.mark.asyncio
    async def test_destroy_session_failure(self, client: SessionClient) -> None:
        """Test that a failed logout is reported as False."""
        with patch(
            "httpx.AsyncClient.delete",
            new_callable=AsyncMock,
            side_effect=httpx.ConnectError("Connection refused"),
        ):
            assert await client.destroy_session("secret") is False

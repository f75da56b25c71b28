"""Shared pytest fixtures for google-workspace-server tests.

This module provides reusable fixtures for settings, a mocked credential
provider, the Gmail/Calendar facades and a patched ``httpx.AsyncClient``.
"""

from collections.abc import Callable, Generator
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from google_workspace_server.api_client import GoogleApiClient
from google_workspace_server.auth.credentials import CredentialProvider
from google_workspace_server.config import Settings
from google_workspace_server.server.dispatcher import ToolDispatcher
from google_workspace_server.services.calendar import CalendarService
from google_workspace_server.services.gmail import GmailService

TEST_ENV = {
    "GOOGLE_CLIENT_ID": "test-client-id.apps.googleusercontent.com",
    "GOOGLE_CLIENT_SECRET": "test-client-secret",  # pragma: allowlist secret
    "GOOGLE_REFRESH_TOKEN": "1//test-refresh-token",
}

TEST_TIMEZONE = "Europe/Berlin"


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def test_env() -> dict[str, str]:
    """Environment with the three required credentials set."""
    return dict(TEST_ENV)


@pytest.fixture
def settings(test_env: dict[str, str]) -> Settings:
    """Settings built from the test environment."""
    return Settings.from_env(test_env)


# =============================================================================
# HTTP Fixtures
# =============================================================================


@pytest.fixture
def make_response() -> Callable[..., httpx.Response]:
    """Factory for real httpx responses carrying a JSON body."""

    def _make(json_data: Any = None, status_code: int = 200) -> httpx.Response:
        if json_data is None:
            return httpx.Response(status_code)
        return httpx.Response(status_code, json=json_data)

    return _make


@pytest.fixture
def mock_http_client() -> Generator[AsyncMock, None, None]:
    """Patch httpx.AsyncClient so no request leaves the process.

    Tests assign ``mock_http_client.request`` an async function
    ``(method, url, **kwargs) -> httpx.Response``.
    """
    with patch("httpx.AsyncClient") as mock_client_class:
        mock_client = AsyncMock()
        mock_client.__aenter__ = AsyncMock(return_value=mock_client)
        mock_client.__aexit__ = AsyncMock(return_value=None)
        mock_client_class.return_value = mock_client
        yield mock_client


# =============================================================================
# Service Fixtures
# =============================================================================


@pytest.fixture
def credential_provider() -> MagicMock:
    """Credential provider that always hands out the same access token."""
    provider = MagicMock(spec=CredentialProvider)
    provider.get_access_token = AsyncMock(return_value="mock_access_token_12345")
    return provider


@pytest.fixture
def api_client(credential_provider: MagicMock) -> GoogleApiClient:
    """Google API client wired to the mocked credential provider."""
    return GoogleApiClient(credential_provider)


@pytest.fixture
def gmail_service(api_client: GoogleApiClient) -> GmailService:
    """Gmail facade over the test API client."""
    return GmailService(api_client, fetch_concurrency=4)


@pytest.fixture
def calendar_service(api_client: GoogleApiClient) -> CalendarService:
    """Calendar facade with a fixed timezone."""
    return CalendarService(api_client, timezone_name=TEST_TIMEZONE)


@pytest.fixture
def dispatcher(gmail_service: GmailService, calendar_service: CalendarService) -> ToolDispatcher:
    """Dispatcher over real facades; combine with mock_http_client."""
    return ToolDispatcher(gmail_service, calendar_service)


@pytest.fixture
def mock_facades() -> tuple[MagicMock, MagicMock]:
    """Gmail and Calendar facades with every operation as an AsyncMock."""
    gmail = MagicMock()
    for name in ("list_emails", "search_emails", "send_email", "modify_email"):
        setattr(gmail, name, AsyncMock())
    gmail.client.close = AsyncMock()

    calendar = MagicMock()
    for name in ("list_events", "create_event", "update_event", "delete_event"):
        setattr(calendar, name, AsyncMock())
    calendar.client.close = AsyncMock()

    return gmail, calendar


@pytest.fixture
def mock_dispatcher(mock_facades: tuple[MagicMock, MagicMock]) -> ToolDispatcher:
    """Dispatcher whose facades are mocks."""
    gmail, calendar = mock_facades
    return ToolDispatcher(gmail, calendar)


# =============================================================================
# CLI Test Fixtures
# =============================================================================


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()

"""Credential provider backed by a single long-lived refresh token.

One provider is built at startup and shared by every request handler.
Access tokens are minted on demand by google-auth; the refresh token itself
is reused for the lifetime of the process.
"""

import asyncio
import logging
from typing import TYPE_CHECKING

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials

from google_workspace_server.auth.models import GOOGLE_TOKEN_URI, OAuthClientCredentials

if TYPE_CHECKING:
    from google_workspace_server.config import Settings

logger = logging.getLogger(__name__)

# Scopes requested by the setup flow and carried by the refresh token
GOOGLE_WORKSPACE_SCOPES = [
    "https://www.googleapis.com/auth/gmail.modify",
    "https://www.googleapis.com/auth/calendar",
    "https://www.googleapis.com/auth/gmail.send",
]


class CredentialProvider:
    """Supplies bearer tokens for Gmail and Calendar requests.

    Attributes:
        credentials: The underlying google-auth credentials object.
    """

    def __init__(
        self,
        client_credentials: OAuthClientCredentials,
        scopes: list[str] | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            client_credentials: Client id, client secret and refresh token.
            scopes: Scopes attached to the refresh token. Informational only;
                Google issues access tokens for whatever the refresh token grants.
        """
        self.credentials = Credentials(  # nosec B106 - token_uri is public Google OAuth endpoint
            token=None,
            refresh_token=client_credentials.refresh_token,
            client_id=client_credentials.client_id,
            client_secret=client_credentials.client_secret,
            token_uri=GOOGLE_TOKEN_URI,
            scopes=scopes if scopes is not None else GOOGLE_WORKSPACE_SCOPES,
        )
        self._refresh_lock = asyncio.Lock()

    @classmethod
    def from_settings(cls, settings: "Settings") -> "CredentialProvider":
        """Create a provider from loaded settings."""
        return cls(settings.credentials)

    async def get_access_token(self) -> str:
        """Get a valid access token, refreshing if necessary.

        Returns:
            Access token string.

        Raises:
            google.auth.exceptions.RefreshError: If Google rejects the refresh.
        """
        if self.credentials.valid:
            return self.credentials.token

        async with self._refresh_lock:
            # Another caller may have refreshed while we waited
            if not self.credentials.valid:
                logger.info("Access token missing or expired, refreshing...")
                loop = asyncio.get_running_loop()
                await loop.run_in_executor(None, self.credentials.refresh, Request())
            return self.credentials.token

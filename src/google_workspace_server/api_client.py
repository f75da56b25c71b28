"""Authenticated HTTP client for Google REST APIs.

Wraps a pooled ``httpx.AsyncClient`` and attaches a bearer token from the
credential provider to every request. This is the single transport handle
the Gmail and Calendar services share.
"""

import logging
from typing import Any

import httpx

from google_workspace_server.auth.credentials import CredentialProvider
from google_workspace_server.errors import GoogleApiError

logger = logging.getLogger(__name__)

# Google API base URLs
CALENDAR_API_BASE = "https://www.googleapis.com/calendar/v3"
GMAIL_API_BASE = "https://gmail.googleapis.com/gmail/v1"


def _error_message(response: httpx.Response) -> str:
    """Extract Google's error message from a failed response.

    Google APIs answer with ``{"error": {"code": ..., "message": ...}}``;
    OAuth endpoints use ``{"error": "...", "error_description": "..."}``.
    """
    try:
        payload = response.json()
    except ValueError:
        payload = None

    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str):
            return str(payload.get("error_description") or error)

    return f"{response.status_code} {response.reason_phrase}".strip()


class GoogleApiClient:
    """Shared, authenticated HTTP client for Google APIs.

    Attributes:
        credentials: Provider of bearer tokens.
    """

    def __init__(self, credentials: CredentialProvider) -> None:
        self.credentials = credentials
        self._http_client: httpx.AsyncClient | None = None

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create shared HTTP client with connection pooling.

        Returns:
            Shared httpx.AsyncClient instance.
        """
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                http2=True,
                limits=httpx.Limits(max_connections=100, max_keepalive_connections=20),
                timeout=httpx.Timeout(30.0, connect=10.0),
            )
        return self._http_client

    async def close(self) -> None:
        """Close the shared HTTP client and release resources."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None

    async def request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        json_data: Any = None,
    ) -> dict[str, Any]:
        """Make an authenticated HTTP request to Google APIs.

        Args:
            method: HTTP method (GET, POST, etc.).
            url: Full URL to request.
            params: Optional query parameters.
            json_data: Optional JSON body data.

        Returns:
            JSON response as a dictionary (empty for bodiless responses).

        Raises:
            GoogleApiError: If Google answers with a non-success status.
        """
        access_token = await self.credentials.get_access_token()
        client = await self._get_http_client()

        response = await client.request(
            method=method,
            url=url,
            params=params,
            json=json_data,
            headers={
                "Authorization": f"Bearer {access_token}",
                "Accept": "application/json",
            },
        )
        if response.status_code >= 400:
            message = _error_message(response)
            logger.warning("%s %s failed (%s): %s", method, url, response.status_code, message)
            raise GoogleApiError(message, status_code=response.status_code)

        if response.status_code == 204 or not response.content:
            return {}
        result: dict[str, Any] = response.json()
        return result

    async def delete(self, url: str) -> None:
        """Make an authenticated DELETE request to Google APIs.

        Args:
            url: Full URL to request.

        Raises:
            GoogleApiError: If the request fails.
        """
        await self.request("DELETE", url)

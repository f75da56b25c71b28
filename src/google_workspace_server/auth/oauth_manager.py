"""Interactive OAuth flow that produces a long-lived refresh token.

This is operator tooling run once before deploying the server. It reads a
client-secret file downloaded from the Google Cloud console, sends the user
through Google's consent screen, captures the redirect on a local HTTP
server and saves the resulting credentials.

Environment Variables:
    GOOGLE_OAUTH_REDIRECT_URI: Redirect URI (default: http://127.0.0.1:8789/callback)
        Supports custom paths like /callback for Web Application OAuth clients.
"""

import asyncio
import html
import json
import os
import secrets
import webbrowser
from datetime import timezone
from http.server import BaseHTTPRequestHandler, HTTPServer
from pathlib import Path
from typing import Any
from urllib.parse import parse_qs, urlparse

from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import Flow

from google_workspace_server.auth.credentials import GOOGLE_WORKSPACE_SCOPES
from google_workspace_server.auth.models import GOOGLE_TOKEN_URI, AuthorizedUserInfo
from google_workspace_server.auth.token_storage import TokenStorage

# OAuth configuration defaults
DEFAULT_OAUTH_HOST = "127.0.0.1"
DEFAULT_OAUTH_PORT = 8789
DEFAULT_REDIRECT_URI = "http://127.0.0.1:8789/callback"
DEFAULT_CLIENT_SECRETS_FILE = "credentials.json"

CLIENT_TYPES = ("installed", "web")


def load_client_config(path: Path) -> dict[str, Any]:
    """Read a Google client-secret file.

    Args:
        path: Path to the JSON file downloaded from the Cloud console.

    Returns:
        The parsed client configuration.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file is not a Desktop or Web client configuration.
    """
    with open(path) as f:
        config = json.load(f)

    if not isinstance(config, dict) or not any(key in config for key in CLIENT_TYPES):
        raise ValueError(
            f"{path} is not an OAuth client-secret file "
            "(expected an 'installed' or 'web' section)"
        )
    return config


def parse_callback(
    request_path: str, callback_path: str, expected_state: str
) -> tuple[int, str | None, str | None]:
    """Interpret one request arriving at the local redirect server.

    Returns:
        ``(status, code, error)``. Requests off the callback path get 404 and
        neither value; callback requests carry exactly one of the two.
    """
    parsed = urlparse(request_path)
    if parsed.path != callback_path:
        return 404, None, None

    params = parse_qs(parsed.query)
    if "error" in params:
        return 400, None, params["error"][0]
    if params.get("state", [None])[0] != expected_state:
        return 400, None, "state mismatch"
    if "code" not in params:
        return 400, None, "no authorization code received"
    return 200, params["code"][0], None


def callback_page(status: int, error: str | None) -> bytes:
    """HTML shown in the browser after the redirect."""
    if status == 404:
        return b"Not Found"
    if error:
        title = "Authentication Failed"
        detail = f"{html.escape(error)}. Please close this window and try again."
    else:
        title = "Authentication Successful!"
        detail = "You can close this window and return to the terminal."
    return f"<html><body><h1>{title}</h1><p>{detail}</p></body></html>".encode()


class OAuthManager:
    """Runs the authorization flow and persists its result.

    Attributes:
        storage: Token storage the resulting credentials are written to.

    Example:
        ```python
        manager = OAuthManager()
        info = await manager.authenticate(Path("credentials.json"))
        print(info.refresh_token)
        ```
    """

    def __init__(self, storage: TokenStorage | None = None) -> None:
        """Initialize OAuth manager.

        Args:
            storage: Token storage instance. Creates default if not provided.
        """
        self.storage = storage or TokenStorage()

    @property
    def token_path(self) -> Path:
        """Get the token storage path."""
        return self.storage.token_path

    def _credentials_to_info(
        self, credentials: Credentials, client_config: dict[str, Any], scopes: list[str]
    ) -> AuthorizedUserInfo:
        """Convert google-auth Credentials into the stored record.

        Args:
            credentials: Credentials returned by the flow.
            client_config: Client configuration the flow ran with.
            scopes: Requested scopes, used when Google does not echo them back.

        Returns:
            Record with client id, client secret and refresh token.

        Raises:
            ValueError: If Google did not return a refresh token.
        """
        if not credentials.refresh_token:
            raise ValueError(
                "Google did not return a refresh token. Revoke the app's access at "
                "https://myaccount.google.com/permissions and run setup again."
            )

        client = next(client_config[key] for key in CLIENT_TYPES if key in client_config)
        expiry = credentials.expiry
        if expiry is not None and expiry.tzinfo is None:
            expiry = expiry.replace(tzinfo=timezone.utc)

        return AuthorizedUserInfo(
            client_id=credentials.client_id or client["client_id"],
            client_secret=credentials.client_secret or client["client_secret"],
            refresh_token=credentials.refresh_token,
            token=credentials.token,
            token_uri=credentials.token_uri or GOOGLE_TOKEN_URI,
            scopes=list(credentials.scopes or scopes),
            expiry=expiry,
        )

    async def authenticate(
        self,
        client_secrets_file: Path,
        scopes: list[str] | None = None,
    ) -> AuthorizedUserInfo:
        """Perform the complete OAuth2 authorization flow.

        Args:
            client_secrets_file: Client-secret JSON from the Cloud console.
            scopes: OAuth scopes to request. Uses GOOGLE_WORKSPACE_SCOPES if not specified.

        Returns:
            The stored credentials record.

        Raises:
            FileNotFoundError: If the client-secret file is missing.
            ValueError: If the file is malformed or no refresh token was issued.
            Exception: If authentication fails.
        """
        if scopes is None:
            scopes = GOOGLE_WORKSPACE_SCOPES

        client_config = load_client_config(client_secrets_file)

        # Get redirect URI from environment (supports custom paths like /callback)
        redirect_uri = os.environ.get("GOOGLE_OAUTH_REDIRECT_URI", DEFAULT_REDIRECT_URI)

        # Run OAuth flow in executor (it's blocking)
        loop = asyncio.get_running_loop()
        credentials = await loop.run_in_executor(
            None, self._run_oauth_flow, client_config, scopes, redirect_uri
        )

        info = self._credentials_to_info(credentials, client_config, scopes)
        self.storage.store(info)
        return info

    def _run_oauth_flow(
        self, client_config: dict, scopes: list[str], redirect_uri: str
    ) -> Credentials:
        """Run the OAuth flow (blocking operation).

        Opens browser for authorization and starts local server to receive callback.

        Args:
            client_config: Google OAuth client configuration (installed or web type).
            scopes: List of OAuth scopes.
            redirect_uri: Full redirect URI including path (e.g., http://127.0.0.1:8789/callback).

        Returns:
            Google OAuth2 credentials.
        """
        flow = Flow.from_client_config(
            client_config,
            scopes=scopes,
            redirect_uri=redirect_uri,
        )

        # Generate state for CSRF protection
        state = secrets.token_urlsafe(32)

        # Offline access + consent prompt so Google issues a refresh token
        auth_url, _ = flow.authorization_url(
            access_type="offline",
            prompt="consent",
            state=state,
        )

        # Parse redirect URI to get host, port, and path
        parsed = urlparse(redirect_uri)
        host = parsed.hostname or DEFAULT_OAUTH_HOST
        port = parsed.port or DEFAULT_OAUTH_PORT
        callback_path = parsed.path or "/callback"

        outcome: dict[str, str | None] = {"code": None, "error": None}

        class OAuthCallbackHandler(BaseHTTPRequestHandler):
            """HTTP handler for OAuth callback."""

            def log_message(self, format: str, *args) -> None:
                """Suppress HTTP server logs."""
                pass

            def do_GET(self) -> None:
                """Handle GET request from OAuth redirect."""
                status, code, error = parse_callback(self.path, callback_path, state)
                if status != 404:
                    outcome["code"], outcome["error"] = code, error

                self.send_response(status)
                self.send_header("Content-type", "text/html")
                self.end_headers()
                self.wfile.write(callback_page(status, error))

        server = HTTPServer((host, port), OAuthCallbackHandler)
        server.timeout = 300  # 5 minute timeout

        print("Opening browser for Google authorization...")
        print(f"If browser doesn't open, visit: {auth_url}")
        webbrowser.open(auth_url)

        # Wait for single callback request
        server.handle_request()
        server.server_close()

        if outcome["error"]:
            raise Exception(f"OAuth authentication failed: {outcome['error']}")

        if not outcome["code"]:
            raise Exception("No authorization code received from Google")

        flow.fetch_token(code=outcome["code"])

        return flow.credentials

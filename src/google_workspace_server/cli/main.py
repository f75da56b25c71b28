"""Command-line interface for google-workspace-server."""

import asyncio
import json
import logging
import os
import sys
from pathlib import Path

import click

from google_workspace_server.__version__ import __version__
from google_workspace_server.auth.oauth_manager import DEFAULT_CLIENT_SECRETS_FILE
from google_workspace_server.auth.token_storage import DEFAULT_TOKEN_FILE
from google_workspace_server.config import CREDENTIAL_ENV_VARS, Settings
from google_workspace_server.errors import ConfigurationError


def configure_logging(level: str) -> None:
    """Send log records to stderr; stdout may carry the MCP channel."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def load_settings() -> Settings:
    """Load settings or exit with status 1 when credentials are missing."""
    try:
        return Settings.from_env()
    except ConfigurationError as e:
        click.echo(f"❌ {e}", err=True)
        click.echo("", err=True)
        click.echo("Run 'google-workspace-server setup' to obtain a refresh token,", err=True)
        click.echo("then export GOOGLE_CLIENT_ID, GOOGLE_CLIENT_SECRET and", err=True)
        click.echo("GOOGLE_REFRESH_TOKEN (or put them in a .env file).", err=True)
        sys.exit(1)


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """Google Workspace Server - Gmail and Calendar tools over MCP and HTTP.

    Tools:
    - Gmail: list_emails, search_emails, send_email, modify_email
    - Calendar: list_events, create_event, update_event, delete_event
    """
    pass


@main.command()
@click.option(
    "--credentials-file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_CLIENT_SECRETS_FILE,
    show_default=True,
    help="OAuth client-secret JSON downloaded from the Google Cloud console",
)
@click.option(
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_TOKEN_FILE,
    show_default=True,
    help="Where to save the resulting credentials",
)
def setup(credentials_file: Path, output: Path) -> None:
    """Obtain a refresh token through Google's consent screen.

    This will:
    1. Open browser for OAuth2 consent flow
    2. Print the client ID, client secret and refresh token
    3. Save them to token.json (owner-only permissions)
    """
    from google_workspace_server.auth import OAuthManager, TokenStorage

    if not credentials_file.exists():
        click.echo(f"❌ Error: client-secret file not found: {credentials_file}")
        click.echo("")
        click.echo("Download an OAuth client (Desktop app) JSON from")
        click.echo("  https://console.cloud.google.com/apis/credentials")
        click.echo("and pass it with --credentials-file.")
        sys.exit(1)

    manager = OAuthManager(storage=TokenStorage(token_path=output))

    click.echo("Starting OAuth authentication flow...")
    click.echo("Browser will open for Google consent...")
    click.echo("")

    try:
        info = asyncio.run(manager.authenticate(credentials_file))
    except Exception as e:
        click.echo(f"❌ Authentication failed: {e}")
        sys.exit(1)

    credentials = info.to_client_credentials()

    click.echo("✓ Authentication successful!")
    click.echo("")
    click.echo(f"Refresh Token: {credentials.refresh_token}")
    click.echo(f"Client ID: {credentials.client_id}")
    click.echo(f"Client Secret: {credentials.client_secret}")
    click.echo("")
    click.echo("Add these to your environment (or .env):")
    for field, var in CREDENTIAL_ENV_VARS.items():
        click.echo(f"  {var}={getattr(credentials, field)}")
    click.echo("")
    click.echo(f"Credentials saved to {manager.token_path}")


@main.command()
def mcp() -> None:
    """Start the MCP server on stdio.

    This command is typically invoked by an MCP client such as Claude Desktop.
    """
    from google_workspace_server.server import main as server_main

    settings = load_settings()
    configure_logging(settings.log_level)

    try:
        server_main(settings)
    except KeyboardInterrupt:
        click.echo("\nServer stopped.", err=True)
    except Exception as e:
        click.echo(f"❌ Server error: {e}", err=True)
        sys.exit(1)


@main.command()
@click.option("--host", default=None, help="Bind address (default: $HOST or 0.0.0.0)")
@click.option("--port", type=int, default=None, help="Port (default: $PORT or 4100)")
def http(host: str | None, port: int | None) -> None:
    """Start the HTTP shim (/health, /tools, /tools/<name>)."""
    from google_workspace_server.server.http_server import run

    settings = load_settings()
    configure_logging(settings.log_level)

    try:
        run(settings, host=host, port=port)
    except KeyboardInterrupt:
        click.echo("\nServer stopped.", err=True)


@main.command()
def tools() -> None:
    """Print the tool catalog as JSON."""
    from google_workspace_server.server.tools import list_tools

    catalog = [
        tool.model_dump(mode="json", by_alias=True, exclude_none=True) for tool in list_tools()
    ]
    click.echo(json.dumps({"tools": catalog}, indent=2))


@main.command()
def doctor() -> None:
    """Check installation and configuration.

    Verifies:
    1. Python dependencies installed
    2. OAuth credentials present in the environment (values are not shown)
    """
    from dotenv import load_dotenv

    load_dotenv()

    click.echo("Google Workspace Server Status:")
    click.echo("")

    click.echo("Dependencies:")
    try:
        import google.auth  # noqa: F401
        import google_auth_oauthlib  # noqa: F401
        import mcp  # noqa: F401

        click.echo("  ✓ google-auth installed")
        click.echo("  ✓ google-auth-oauthlib installed")
        click.echo("  ✓ mcp installed")
    except ImportError as e:
        click.echo(f"  ❌ Missing dependency: {e}")
        sys.exit(1)

    click.echo("")
    click.echo("Configuration:")
    missing = []
    for var in CREDENTIAL_ENV_VARS.values():
        if os.environ.get(var, "").strip():
            click.echo(f"  ✓ {var} set")
        else:
            click.echo(f"  ❌ {var} not set")
            missing.append(var)
    click.echo(f"  HTTP port: {os.environ.get('PORT') or 4100}")
    click.echo("")

    if missing:
        click.echo("❌ Setup required. Run 'google-workspace-server setup' and export the values.")
        sys.exit(1)

    click.echo("✓ Ready to use!")


if __name__ == "__main__":
    main()

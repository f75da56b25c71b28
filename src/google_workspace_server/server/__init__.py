"""MCP and HTTP transports for the Google Workspace tools.

Tools (8):
- Gmail: list_emails, search_emails, send_email, modify_email
- Calendar: list_events, create_event, update_event, delete_event

Transports: Stdio (MCP) and HTTP (REST shim)
Authentication: OAuth 2.0 refresh token from the environment
"""

from google_workspace_server.config import Settings
from google_workspace_server.server.dispatcher import ToolDispatcher, create_dispatcher
from google_workspace_server.server.google_workspace_server import (
    GoogleWorkspaceServer,
    main,
)
from google_workspace_server.server.http_server import create_app


def create_server(settings: Settings | None = None) -> GoogleWorkspaceServer:
    """Create and configure a Google Workspace MCP server.

    Returns:
        GoogleWorkspaceServer: Configured server instance ready to run.

    Example:
        >>> server = create_server()
        >>> asyncio.run(server.run())
    """
    return GoogleWorkspaceServer.from_settings(settings or Settings.from_env())


__all__ = [
    "create_app",
    "create_dispatcher",
    "create_server",
    "GoogleWorkspaceServer",
    "main",
    "ToolDispatcher",
]

"""Google Workspace MCP server over stdio.

Advertises the Gmail and Calendar tools through the MCP "list tools"
request and executes them through "call tool". Unknown tools and invalid
arguments are answered with JSON-RPC errors; everything else, including
Google API failures, comes back as a tool result envelope.
"""

import asyncio
import logging

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import CallToolRequest, ServerResult, Tool

from google_workspace_server.__version__ import __version__
from google_workspace_server.config import Settings
from google_workspace_server.server.dispatcher import ToolDispatcher, create_dispatcher
from google_workspace_server.server.tools import list_tools

logger = logging.getLogger(__name__)

SERVER_NAME = "google-workspace-server"


class GoogleWorkspaceServer:
    """MCP server for the Gmail and Calendar tools.

    Attributes:
        server: MCP Server instance.
        dispatcher: Tool dispatcher shared with any other transport.
    """

    def __init__(self, dispatcher: ToolDispatcher) -> None:
        """Initialize the Google Workspace MCP server."""
        self.server = Server(SERVER_NAME, version=__version__)
        self.dispatcher = dispatcher
        self._setup_handlers()

    @classmethod
    def from_settings(cls, settings: Settings) -> "GoogleWorkspaceServer":
        """Create a server with a freshly wired dispatcher."""
        return cls(create_dispatcher(settings))

    def _setup_handlers(self) -> None:
        """Register MCP tool handlers."""

        @self.server.list_tools()
        async def handle_list_tools() -> list[Tool]:
            """Return list of available tools."""
            return list_tools()

        # McpError raised here must reach the session as a JSON-RPC error,
        # which @server.call_tool() would turn into an isError result.
        async def handle_call_tool(request: CallToolRequest) -> ServerResult:
            result = await self.dispatcher.invoke(
                request.params.name, request.params.arguments or {}
            )
            return ServerResult(result)

        self.server.request_handlers[CallToolRequest] = handle_call_tool

    async def close(self) -> None:
        """Release outbound HTTP resources."""
        await self.dispatcher.close()

    async def run(self) -> None:
        """Run the MCP server using stdio transport."""
        try:
            async with stdio_server() as (read_stream, write_stream):
                logger.info("Google Workspace MCP server running on stdio")
                await self.server.run(
                    read_stream,
                    write_stream,
                    self.server.create_initialization_options(),
                )
        finally:
            await self.close()


def main(settings: Settings | None = None) -> None:
    """Entry point for the stdio MCP server."""
    server = GoogleWorkspaceServer.from_settings(settings or Settings.from_env())
    asyncio.run(server.run())


if __name__ == "__main__":
    main()

"""Integration tests for the Google Workspace MCP server.

Drives the server through a real MCP client session over in-memory
streams. All Google API calls are mocked via httpx.AsyncClient patching.
"""

import json
from unittest.mock import AsyncMock, patch

import pytest
from mcp.shared.exceptions import McpError
from mcp.shared.memory import create_connected_server_and_client_session
from mcp.types import INVALID_PARAMS, METHOD_NOT_FOUND, CallToolRequest

from google_workspace_server.server import GoogleWorkspaceServer, create_server
from google_workspace_server.server.dispatcher import ToolDispatcher
from google_workspace_server.server.google_workspace_server import SERVER_NAME


@pytest.fixture
def server(dispatcher: ToolDispatcher) -> GoogleWorkspaceServer:
    """Server over real facades; pair with mock_http_client."""
    return GoogleWorkspaceServer(dispatcher)


@pytest.mark.integration
class TestServerSetup:
    """Tests for server construction."""

    def test_should_register_call_tool_handler(self, server: GoogleWorkspaceServer) -> None:
        assert CallToolRequest in server.server.request_handlers

    def test_should_use_server_name(self, server: GoogleWorkspaceServer) -> None:
        assert server.server.name == SERVER_NAME

    def test_should_create_server_from_settings(self, settings) -> None:
        server = create_server(settings)

        assert isinstance(server.dispatcher, ToolDispatcher)
        assert server.dispatcher.gmail.client is server.dispatcher.calendar.client

    @pytest.mark.asyncio
    async def test_should_close_dispatcher(self, mock_dispatcher: ToolDispatcher) -> None:
        server = GoogleWorkspaceServer(mock_dispatcher)

        await server.close()

        mock_dispatcher.gmail.client.close.assert_awaited_once()


@pytest.mark.integration
class TestListTools:
    """Tests for the MCP list-tools request."""

    @pytest.mark.asyncio
    async def test_should_list_eight_tools(self, server: GoogleWorkspaceServer) -> None:
        async with create_connected_server_and_client_session(server.server) as client:
            result = await client.list_tools()

        assert [tool.name for tool in result.tools] == [
            "list_emails",
            "search_emails",
            "send_email",
            "modify_email",
            "list_events",
            "create_event",
            "update_event",
            "delete_event",
        ]
        send_email = next(tool for tool in result.tools if tool.name == "send_email")
        assert send_email.inputSchema["required"] == ["to", "subject", "body"]


@pytest.mark.integration
class TestCallTool:
    """Tests for the MCP call-tool request."""

    @pytest.mark.asyncio
    async def test_should_search_emails(
        self, server: GoogleWorkspaceServer, mock_http_client: AsyncMock, make_response
    ) -> None:
        async def mock_request(method, url, **kwargs):
            if url.endswith("/messages"):
                return make_response({"messages": [{"id": "msg_001", "threadId": "t1"}]})
            return make_response(
                {
                    "id": "msg_001",
                    "payload": {
                        "headers": [
                            {"name": "Subject", "value": "Quarterly report"},
                            {"name": "From", "value": "alice@example.com"},
                            {"name": "Date", "value": "Tue, 4 Mar 2025 08:00:00 +0000"},
                        ]
                    },
                }
            )

        mock_http_client.request = mock_request

        async with create_connected_server_and_client_session(server.server) as client:
            result = await client.call_tool(
                "search_emails", {"query": "has:attachment", "maxResults": 1}
            )

        assert result.isError is False
        assert json.loads(result.content[0].text) == [
            {
                "id": "msg_001",
                "subject": "Quarterly report",
                "from": "alice@example.com",
                "date": "Tue, 4 Mar 2025 08:00:00 +0000",
            }
        ]

    @pytest.mark.asyncio
    async def test_should_report_provider_error_in_result(
        self, server: GoogleWorkspaceServer, mock_http_client: AsyncMock, make_response
    ) -> None:
        async def mock_request(method, url, **kwargs):
            return make_response({"error": {"code": 429, "message": "quota exceeded"}}, 429)

        mock_http_client.request = mock_request

        async with create_connected_server_and_client_session(server.server) as client:
            result = await client.call_tool(
                "create_event",
                {"summary": "Sync", "start": "2025-03-01T10:00:00", "end": "2025-03-01T11:00:00"},
            )

        assert result.isError is True
        assert result.content[0].text == "Error creating event: quota exceeded"

    @pytest.mark.asyncio
    async def test_should_answer_unknown_tool_with_protocol_error(
        self, server: GoogleWorkspaceServer
    ) -> None:
        async with create_connected_server_and_client_session(server.server) as client:
            with pytest.raises(McpError) as exc_info:
                await client.call_tool("bogus_tool", {})

        assert exc_info.value.error.code == METHOD_NOT_FOUND
        assert "Unknown tool: bogus_tool" in exc_info.value.error.message

    @pytest.mark.asyncio
    async def test_should_answer_invalid_arguments_with_protocol_error(
        self, server: GoogleWorkspaceServer, mock_http_client: AsyncMock
    ) -> None:
        mock_http_client.request = AsyncMock()

        async with create_connected_server_and_client_session(server.server) as client:
            with pytest.raises(McpError) as exc_info:
                await client.call_tool("delete_event", {})

        assert exc_info.value.error.code == INVALID_PARAMS
        mock_http_client.request.assert_not_called()

    @pytest.mark.asyncio
    async def test_should_delete_event(
        self, server: GoogleWorkspaceServer, mock_http_client: AsyncMock, make_response
    ) -> None:
        methods: list[str] = []

        async def mock_request(method, url, **kwargs):
            methods.append(method)
            return make_response(status_code=204)

        mock_http_client.request = mock_request

        async with create_connected_server_and_client_session(server.server) as client:
            result = await client.call_tool("delete_event", {"eventId": "evt_42"})

        assert methods == ["DELETE"]
        assert json.loads(result.content[0].text) == {"eventId": "evt_42", "status": "deleted"}


@pytest.mark.integration
class TestMain:
    """Tests for the stdio entry point."""

    def test_should_run_server_with_settings(self, settings) -> None:
        with patch(
            "google_workspace_server.server.google_workspace_server.GoogleWorkspaceServer.run",
            new_callable=AsyncMock,
        ) as mock_run:
            from google_workspace_server.server.google_workspace_server import main

            main(settings)

        mock_run.assert_awaited_once()

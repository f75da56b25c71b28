"""Exception types for google-workspace-server.

Protocol-level failures (unknown tool, invalid arguments) subclass
``McpError`` so the MCP server reports them as JSON-RPC errors. Provider
failures are plain exceptions that the dispatcher folds into the tool
result envelope.
"""

from mcp.shared.exceptions import McpError
from mcp.types import INVALID_PARAMS, METHOD_NOT_FOUND, ErrorData


class WorkspaceServerError(Exception):
    """Base class for errors raised by this package."""


class ConfigurationError(WorkspaceServerError):
    """Required configuration is missing or malformed."""


class GoogleApiError(WorkspaceServerError):
    """A Google API call returned a non-success status.

    Attributes:
        status_code: HTTP status code returned by Google.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ToolNotFoundError(McpError):
    """The requested tool name is not in the catalog."""

    def __init__(self, name: str) -> None:
        self.tool_name = name
        super().__init__(ErrorData(code=METHOD_NOT_FOUND, message=f"Unknown tool: {name}"))


class ToolValidationError(McpError):
    """Tool arguments do not match the tool's input schema."""

    def __init__(self, name: str, detail: str) -> None:
        self.tool_name = name
        self.detail = detail
        super().__init__(
            ErrorData(
                code=INVALID_PARAMS,
                message=f"Invalid arguments for tool {name}: {detail}",
            )
        )

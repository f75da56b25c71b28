"""Static catalog of the tools this server advertises."""

from mcp.types import Tool

_MAX_RESULTS = {
    "type": "number",
    "description": "Maximum number of results to return (default: 10)",
}

TOOLS: tuple[Tool, ...] = (
    Tool(
        name="list_emails",
        description="List recent emails from Gmail inbox",
        inputSchema={
            "type": "object",
            "properties": {
                "maxResults": _MAX_RESULTS,
                "query": {
                    "type": "string",
                    "description": "Search query to filter emails",
                },
            },
            "required": [],
        },
    ),
    Tool(
        name="search_emails",
        description="Search emails with advanced query",
        inputSchema={
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": 'Gmail search query (e.g., "from:example@gmail.com has:attachment")',
                },
                "maxResults": _MAX_RESULTS,
            },
            "required": ["query"],
        },
    ),
    Tool(
        name="send_email",
        description="Send a new email",
        inputSchema={
            "type": "object",
            "properties": {
                "to": {"type": "string", "description": "Recipient email address"},
                "subject": {"type": "string", "description": "Email subject"},
                "body": {"type": "string", "description": "Email body (can include HTML)"},
                "cc": {"type": "string", "description": "CC recipients (comma-separated)"},
                "bcc": {"type": "string", "description": "BCC recipients (comma-separated)"},
            },
            "required": ["to", "subject", "body"],
        },
    ),
    Tool(
        name="modify_email",
        description="Modify email labels (archive, trash, mark read/unread)",
        inputSchema={
            "type": "object",
            "properties": {
                "id": {"type": "string", "description": "Email ID"},
                "addLabels": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Labels to add",
                },
                "removeLabels": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Labels to remove",
                },
            },
            "required": ["id"],
        },
    ),
    Tool(
        name="list_events",
        description="List upcoming calendar events",
        inputSchema={
            "type": "object",
            "properties": {
                "maxResults": _MAX_RESULTS,
                "timeMin": {
                    "type": "string",
                    "description": "Start time in ISO format (default: now)",
                },
                "timeMax": {"type": "string", "description": "End time in ISO format"},
            },
            "required": [],
        },
    ),
    Tool(
        name="create_event",
        description="Create a new calendar event",
        inputSchema={
            "type": "object",
            "properties": {
                "summary": {"type": "string", "description": "Event title"},
                "location": {"type": "string", "description": "Event location"},
                "description": {"type": "string", "description": "Event description"},
                "start": {"type": "string", "description": "Start time in ISO format"},
                "end": {"type": "string", "description": "End time in ISO format"},
                "attendees": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "List of attendee email addresses",
                },
            },
            "required": ["summary", "start", "end"],
        },
    ),
    Tool(
        name="update_event",
        description=(
            "Update an existing calendar event. Omitted fields are left unchanged; "
            "pass null to clear a field."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "eventId": {"type": "string", "description": "Event ID to update"},
                "summary": {"type": ["string", "null"], "description": "New event title"},
                "location": {"type": ["string", "null"], "description": "New event location"},
                "description": {
                    "type": ["string", "null"],
                    "description": "New event description",
                },
                "start": {
                    "type": ["string", "null"],
                    "description": "New start time in ISO format",
                },
                "end": {"type": ["string", "null"], "description": "New end time in ISO format"},
                "attendees": {
                    "type": ["array", "null"],
                    "items": {"type": "string"},
                    "description": "New list of attendee email addresses",
                },
            },
            "required": ["eventId"],
        },
    ),
    Tool(
        name="delete_event",
        description="Delete a calendar event",
        inputSchema={
            "type": "object",
            "properties": {
                "eventId": {"type": "string", "description": "Event ID to delete"},
            },
            "required": ["eventId"],
        },
    ),
)

_TOOLS_BY_NAME = {tool.name: tool for tool in TOOLS}


def list_tools() -> list[Tool]:
    """Return the tool catalog. Same tools, same order, every call."""
    return [tool.model_copy(deep=True) for tool in TOOLS]


def get_tool(name: str) -> Tool | None:
    """Look up a tool descriptor by name."""
    return _TOOLS_BY_NAME.get(name)

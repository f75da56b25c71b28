"""Routes tool invocations to the Gmail and Calendar facades.

Every result, success or provider failure, comes back as a
``CallToolResult`` envelope. Unknown tool names and schema violations are
raised instead, so callers can tell a protocol mistake from a business error.
"""

import json
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import jsonschema
from mcp.types import CallToolResult, TextContent

from google_workspace_server.api_client import GoogleApiClient
from google_workspace_server.auth.credentials import CredentialProvider
from google_workspace_server.config import Settings
from google_workspace_server.errors import ToolNotFoundError, ToolValidationError
from google_workspace_server.server.tools import get_tool
from google_workspace_server.services.calendar import PATCHABLE_FIELDS, CalendarService
from google_workspace_server.services.gmail import GmailService

logger = logging.getLogger(__name__)

DEFAULT_MAX_RESULTS = 10

Handler = Callable[[dict[str, Any]], Awaitable[Any]]


def text_result(text: str, is_error: bool = False) -> CallToolResult:
    """Wrap a single line of text in the result envelope."""
    return CallToolResult(content=[TextContent(type="text", text=text)], isError=is_error)


def validate_arguments(name: str, schema: dict[str, Any], arguments: dict[str, Any]) -> None:
    """Check arguments against a tool's input schema.

    Raises:
        ToolValidationError: On the first schema violation found.
    """
    try:
        jsonschema.validate(instance=arguments, schema=schema)
    except jsonschema.ValidationError as e:
        raise ToolValidationError(name, e.message) from e


def _max_results(arguments: dict[str, Any]) -> int:
    value = arguments.get("maxResults")
    return DEFAULT_MAX_RESULTS if value is None else int(value)


class ToolDispatcher:
    """Maps tool names to facade calls and normalizes their results.

    Attributes:
        gmail: Gmail facade.
        calendar: Calendar facade.
    """

    def __init__(self, gmail: GmailService, calendar: CalendarService) -> None:
        self.gmail = gmail
        self.calendar = calendar
        # name -> (error prefix, handler)
        self._handlers: dict[str, tuple[str, Handler]] = {
            "list_emails": ("Error fetching emails", self._list_emails),
            "search_emails": ("Error fetching emails", self._search_emails),
            "send_email": ("Error sending email", self._send_email),
            "modify_email": ("Error modifying email", self._modify_email),
            "list_events": ("Error fetching calendar events", self._list_events),
            "create_event": ("Error creating event", self._create_event),
            "update_event": ("Error updating event", self._update_event),
            "delete_event": ("Error deleting event", self._delete_event),
        }

    async def invoke(self, name: str, arguments: dict[str, Any] | None) -> CallToolResult:
        """Run a tool and return its result envelope.

        Args:
            name: Tool name.
            arguments: Tool arguments; ``None`` is treated as no arguments.

        Returns:
            Envelope with pretty-printed JSON on success, or an error line.

        Raises:
            ToolNotFoundError: If the tool name is not recognized.
            ToolValidationError: If the arguments violate the tool's schema.
        """
        tool = get_tool(name)
        entry = self._handlers.get(name)
        if tool is None or entry is None:
            raise ToolNotFoundError(name)

        arguments = dict(arguments or {})
        validate_arguments(name, tool.inputSchema, arguments)

        error_prefix, handler = entry
        logger.info("Calling tool %s", name)
        try:
            result = await handler(arguments)
        except Exception as e:
            logger.exception(f"Error calling tool {name}")
            return text_result(f"{error_prefix}: {e}", is_error=True)

        return text_result(json.dumps(result, indent=2))

    # =========================================================================
    # Gmail
    # =========================================================================

    async def _list_emails(self, arguments: dict[str, Any]) -> Any:
        return await self.gmail.list_emails(
            max_results=_max_results(arguments),
            query=arguments.get("query") or "",
        )

    async def _search_emails(self, arguments: dict[str, Any]) -> Any:
        return await self.gmail.search_emails(
            query=arguments.get("query") or "",
            max_results=_max_results(arguments),
        )

    async def _send_email(self, arguments: dict[str, Any]) -> Any:
        return await self.gmail.send_email(
            to=arguments["to"],
            subject=arguments["subject"],
            body=arguments["body"],
            cc=arguments.get("cc"),
            bcc=arguments.get("bcc"),
        )

    async def _modify_email(self, arguments: dict[str, Any]) -> Any:
        return await self.gmail.modify_email(
            arguments["id"],
            add_labels=arguments.get("addLabels"),
            remove_labels=arguments.get("removeLabels"),
        )

    # =========================================================================
    # Calendar
    # =========================================================================

    async def _list_events(self, arguments: dict[str, Any]) -> Any:
        return await self.calendar.list_events(
            max_results=_max_results(arguments),
            time_min=arguments.get("timeMin"),
            time_max=arguments.get("timeMax"),
        )

    async def _create_event(self, arguments: dict[str, Any]) -> Any:
        return await self.calendar.create_event(
            summary=arguments["summary"],
            start=arguments["start"],
            end=arguments["end"],
            location=arguments.get("location"),
            description=arguments.get("description"),
            attendees=arguments.get("attendees"),
        )

    async def _update_event(self, arguments: dict[str, Any]) -> Any:
        changes = {field: arguments[field] for field in PATCHABLE_FIELDS if field in arguments}
        return await self.calendar.update_event(arguments["eventId"], changes)

    async def _delete_event(self, arguments: dict[str, Any]) -> Any:
        return await self.calendar.delete_event(arguments["eventId"])

    async def close(self) -> None:
        """Release the HTTP connections shared by both facades."""
        await self.gmail.client.close()
        await self.calendar.client.close()


def create_dispatcher(settings: Settings) -> ToolDispatcher:
    """Wire one credential provider and API client into both facades."""
    client = GoogleApiClient(CredentialProvider.from_settings(settings))
    return ToolDispatcher(
        gmail=GmailService(client, fetch_concurrency=settings.fetch_concurrency),
        calendar=CalendarService(client),
    )

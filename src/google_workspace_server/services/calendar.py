"""Calendar facade: list, create, patch and delete events on the primary calendar."""

import logging
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from tzlocal import get_localzone_name

from google_workspace_server.api_client import CALENDAR_API_BASE, GoogleApiClient

logger = logging.getLogger(__name__)

CALENDAR_ID = "primary"

# Fields update_event accepts besides the event id
PATCHABLE_FIELDS = ("summary", "location", "description", "start", "end", "attendees")


def utc_now_rfc3339() -> str:
    """Current time as an RFC 3339 UTC timestamp."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def summarize_event(item: dict[str, Any]) -> dict[str, Any]:
    """Project a provider event onto id, summary, start, end and location."""
    return {
        "id": item.get("id"),
        "summary": item.get("summary"),
        "start": item.get("start"),
        "end": item.get("end"),
        "location": item.get("location"),
    }


class CalendarService:
    """Thin call-through to the Google Calendar API.

    Attributes:
        client: Authenticated Google API client.
        timezone: IANA zone attached to event start/end times.
    """

    def __init__(self, client: GoogleApiClient, timezone_name: str | None = None) -> None:
        self.client = client
        self.timezone = timezone_name or get_localzone_name()

    @property
    def events_url(self) -> str:
        return f"{CALENDAR_API_BASE}/calendars/{CALENDAR_ID}/events"

    def _event_time(self, value: str) -> dict[str, str]:
        return {"dateTime": value, "timeZone": self.timezone}

    async def list_events(
        self,
        max_results: int = 10,
        time_min: str | None = None,
        time_max: str | None = None,
    ) -> list[dict[str, Any]]:
        """List upcoming events, expanded and ordered by start time.

        The provider's ordering is passed through unchanged.

        Args:
            max_results: Maximum number of events to return.
            time_min: Lower bound in RFC 3339 (default: now).
            time_max: Optional upper bound in RFC 3339.

        Returns:
            Event summaries.
        """
        params: dict[str, Any] = {
            "maxResults": max_results,
            "singleEvents": "true",
            "orderBy": "startTime",
            "timeMin": time_min or utc_now_rfc3339(),
        }
        if time_max:
            params["timeMax"] = time_max

        response = await self.client.request("GET", self.events_url, params=params)
        return [summarize_event(item) for item in response.get("items") or []]

    async def create_event(
        self,
        summary: str,
        start: str,
        end: str,
        location: str | None = None,
        description: str | None = None,
        attendees: list[str] | None = None,
    ) -> dict[str, Any]:
        """Create an event on the primary calendar.

        Returns:
            The created event as returned by Google.
        """
        event_body: dict[str, Any] = {
            "summary": summary,
            "start": self._event_time(start),
            "end": self._event_time(end),
            "attendees": [{"email": email} for email in attendees or []],
        }
        if location is not None:
            event_body["location"] = location
        if description is not None:
            event_body["description"] = description

        return await self.client.request("POST", self.events_url, json_data=event_body)

    def build_patch(self, changes: Mapping[str, Any]) -> dict[str, Any]:
        """Build a sparse event patch.

        Keys absent from ``changes`` are left out. A key present with ``None``
        clears the field. Any other value, including ``""``, is sent as given.
        """
        patch: dict[str, Any] = {}
        for field in PATCHABLE_FIELDS:
            if field not in changes:
                continue
            value = changes[field]
            if field in ("start", "end"):
                patch[field] = None if value is None else self._event_time(value)
            elif field == "attendees":
                patch[field] = [{"email": email} for email in value or []]
            else:
                patch[field] = value
        return patch

    async def update_event(self, event_id: str, changes: Mapping[str, Any]) -> dict[str, Any]:
        """Patch an event with only the supplied fields.

        Args:
            event_id: Event to update.
            changes: Field values keyed by ``PATCHABLE_FIELDS`` names.

        Returns:
            The updated event as returned by Google.
        """
        patch = self.build_patch(changes)
        logger.debug("Patching event %s fields=%s", event_id, sorted(patch))
        return await self.client.request(
            "PATCH", f"{self.events_url}/{event_id}", json_data=patch
        )

    async def delete_event(self, event_id: str) -> dict[str, Any]:
        """Delete an event. Google returns no body, so the id is echoed back."""
        await self.client.delete(f"{self.events_url}/{event_id}")
        return {"eventId": event_id, "status": "deleted"}

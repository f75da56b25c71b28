"""Gmail facade: list, search, send and relabel messages in the "me" mailbox."""

import asyncio
import base64
import logging
from typing import Any

from google_workspace_server.api_client import GMAIL_API_BASE, GoogleApiClient

logger = logging.getLogger(__name__)

USER_ID = "me"
SUMMARY_HEADERS = ("Subject", "From", "Date")
DEFAULT_FETCH_CONCURRENCY = 10


def find_header(headers: list[dict[str, Any]], name: str) -> str:
    """Return the value of the first header named exactly ``name``, or ``""``."""
    for header in headers:
        if header.get("name") == name:
            return header.get("value") or ""
    return ""


def build_mime_message(
    to: str,
    subject: str,
    body: str,
    cc: str | None = None,
    bcc: str | None = None,
) -> str:
    """Build an HTML email as CRLF-joined header lines, a blank line and the body.

    Cc and Bcc lines are left out entirely when not given.
    """
    lines = [
        "Content-Type: text/html; charset=utf-8",
        "MIME-Version: 1.0",
        f"To: {to}",
    ]
    if cc:
        lines.append(f"Cc: {cc}")
    if bcc:
        lines.append(f"Bcc: {bcc}")
    lines.append(f"Subject: {subject}")
    lines.append("")
    lines.append(body)
    return "\r\n".join(lines)


def encode_raw_message(message: str) -> str:
    """Base64url-encode a message for the Gmail ``raw`` field, padding stripped."""
    return base64.urlsafe_b64encode(message.encode("utf-8")).decode("ascii").rstrip("=")


class GmailService:
    """Thin call-through to the Gmail API.

    Attributes:
        client: Authenticated Google API client.
        fetch_concurrency: Upper bound on concurrent message detail fetches.
    """

    def __init__(
        self, client: GoogleApiClient, fetch_concurrency: int = DEFAULT_FETCH_CONCURRENCY
    ) -> None:
        self.client = client
        self.fetch_concurrency = fetch_concurrency

    async def list_emails(self, max_results: int = 10, query: str = "") -> list[dict[str, str]]:
        """List messages matching a Gmail search filter.

        Issues one list call, then one metadata fetch per returned message.
        The fetches run concurrently; if any fails, the whole call fails.

        Args:
            max_results: Maximum number of messages to return.
            query: Raw Gmail search filter (e.g. ``from:alice has:attachment``).

        Returns:
            Email summaries with id, subject, from and date.
        """
        if max_results <= 0:
            return []

        url = f"{GMAIL_API_BASE}/users/{USER_ID}/messages"
        response = await self.client.request(
            "GET", url, params={"q": query, "maxResults": max_results}
        )

        message_list = response.get("messages") or []
        if not message_list:
            return []

        semaphore = asyncio.Semaphore(self.fetch_concurrency)

        async def fetch_summary(msg_id: str) -> dict[str, str]:
            async with semaphore:
                detail = await self.client.request(
                    "GET",
                    f"{GMAIL_API_BASE}/users/{USER_ID}/messages/{msg_id}",
                    params={"format": "metadata", "metadataHeaders": list(SUMMARY_HEADERS)},
                )
            headers = (detail.get("payload") or {}).get("headers") or []
            return {
                "id": msg_id,
                "subject": find_header(headers, "Subject"),
                "from": find_header(headers, "From"),
                "date": find_header(headers, "Date"),
            }

        logger.debug("Fetching details for %d messages", len(message_list))
        summaries = await asyncio.gather(*[fetch_summary(msg["id"]) for msg in message_list])
        return list(summaries)

    async def search_emails(self, query: str, max_results: int = 10) -> list[dict[str, str]]:
        """Search messages; same behavior as :meth:`list_emails`."""
        return await self.list_emails(max_results=max_results, query=query)

    async def send_email(
        self,
        to: str,
        subject: str,
        body: str,
        cc: str | None = None,
        bcc: str | None = None,
    ) -> dict[str, Any]:
        """Send an HTML email.

        Returns:
            Sent message id, thread id and labels.
        """
        raw_message = encode_raw_message(build_mime_message(to, subject, body, cc, bcc))

        url = f"{GMAIL_API_BASE}/users/{USER_ID}/messages/send"
        response = await self.client.request("POST", url, json_data={"raw": raw_message})

        return {
            "id": response.get("id"),
            "threadId": response.get("threadId"),
            "labelIds": response.get("labelIds", []),
        }

    async def modify_email(
        self,
        message_id: str,
        add_labels: list[str] | None = None,
        remove_labels: list[str] | None = None,
    ) -> dict[str, Any]:
        """Add or remove labels on a message (archive, trash, mark read/unread).

        Empty label lists are a valid no-op.
        """
        url = f"{GMAIL_API_BASE}/users/{USER_ID}/messages/{message_id}/modify"
        response = await self.client.request(
            "POST",
            url,
            json_data={
                "addLabelIds": list(add_labels or []),
                "removeLabelIds": list(remove_labels or []),
            },
        )

        return {
            "id": response.get("id", message_id),
            "threadId": response.get("threadId"),
            "labelIds": response.get("labelIds", []),
        }

"""Facades over the Gmail and Calendar REST APIs."""

from google_workspace_server.services.calendar import CalendarService
from google_workspace_server.services.gmail import GmailService

__all__ = ["CalendarService", "GmailService"]

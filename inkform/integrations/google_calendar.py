"""Google Calendar adapter.

Supports two credential modes, detected from the stored JSON:
  1. Service account JSON (type == "service_account")
  2. OAuth 2.0 user tokens (type == "oauth") obtained via Google sign-in
"""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Dict

from inkform.integrations.base import CalendarProvider

logger = logging.getLogger(__name__)

_SCOPES = ["https://www.googleapis.com/auth/calendar"]


def _build_service(credentials_json: str):
    """Build a Google Calendar API v3 service from credentials JSON."""
    from googleapiclient.discovery import build

    info = json.loads(credentials_json)
    if info.get("type", "service_account") == "oauth":
        return _build_service_oauth(info)

    from google.oauth2.service_account import Credentials
    creds = Credentials.from_service_account_info(info, scopes=_SCOPES)
    return build("calendar", "v3", credentials=creds, cache_discovery=False)


def _build_service_oauth(info: Dict[str, Any]):
    """Build Calendar service from OAuth tokens, refreshing if needed."""
    from google.oauth2.credentials import Credentials
    from googleapiclient.discovery import build

    creds = Credentials(
        token=info.get("access_token"),
        refresh_token=info.get("refresh_token"),
        token_uri=info.get("token_uri", "https://oauth2.googleapis.com/token"),
        client_id=info.get("client_id"),
        client_secret=info.get("client_secret"),
        scopes=_SCOPES,
    )

    if creds.expired and creds.refresh_token:
        from google.auth.transport.requests import Request
        creds.refresh(Request())
        logger.info("Google OAuth: token refreshed")

    return build("calendar", "v3", credentials=creds, cache_discovery=False)


class GoogleCalendarProvider(CalendarProvider):
    """Inserts events with the blocking Google client, run in the default executor."""

    def __init__(self, credentials_json: str, calendar_id: str = "primary") -> None:
        self._credentials_json = credentials_json
        self._calendar_id = calendar_id

    async def create_event(self, event: Dict[str, Any]) -> Dict[str, Any]:
        def _sync() -> Dict[str, Any]:
            service = _build_service(self._credentials_json)
            return service.events().insert(calendarId=self._calendar_id, body=event).execute()

        created = await asyncio.get_running_loop().run_in_executor(None, _sync)
        logger.info("GoogleCalendar: created event %s", created.get("id"))
        return created

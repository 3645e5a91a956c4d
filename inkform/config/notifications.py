"""
inkform.config.notifications – settings shared by the calendar and e-mail side effects.

Per-studio credentials (SMTP host, Google credentials) live on the studio row;
this holds the process-wide knobs.

Env vars: SMTP_TIMEOUT_SECONDS, GOOGLE_CALENDAR_ID, STUDIO_TIMEZONE, EMAIL_FROM_FALLBACK.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError


@dataclass(frozen=True)
class NotificationConfig:
    smtp_timeout_seconds: int = 10
    """Socket timeout for one SMTP session; the only timeout the core relies on."""

    calendar_id: str = "primary"
    timezone: str = "Europe/Paris"
    """IANA zone written into calendar events and used to render dates in e-mails."""

    email_from_fallback: str = "noreply@inkform.app"
    """Sender used when a studio has not configured ``email_from``."""

    def __post_init__(self) -> None:
        if not isinstance(self.smtp_timeout_seconds, int) or self.smtp_timeout_seconds < 1:
            raise ValueError(f"smtp_timeout_seconds must be >= 1, got {self.smtp_timeout_seconds!r}")
        if not self.calendar_id.strip():
            raise ValueError("calendar_id must be non-empty")
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as exc:
            raise ValueError(f"Unknown timezone {self.timezone!r}") from exc

    @property
    def zone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    @classmethod
    def from_env(cls) -> NotificationConfig:
        return cls(
            smtp_timeout_seconds=int(os.environ.get("SMTP_TIMEOUT_SECONDS", "10")),
            calendar_id=os.environ.get("GOOGLE_CALENDAR_ID", "primary"),
            timezone=os.environ.get("STUDIO_TIMEZONE", "Europe/Paris"),
            email_from_fallback=os.environ.get("EMAIL_FROM_FALLBACK", "noreply@inkform.app"),
        )


def load_notification_config() -> NotificationConfig:
    return NotificationConfig.from_env()

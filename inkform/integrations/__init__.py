"""External providers: Google Calendar and SMTP."""
from inkform.integrations.base import CalendarProvider, MailTransport
from inkform.integrations.google_calendar import GoogleCalendarProvider
from inkform.integrations.smtp_mailer import SMTPMailTransport

__all__ = [
    "CalendarProvider",
    "MailTransport",
    "GoogleCalendarProvider",
    "SMTPMailTransport",
]

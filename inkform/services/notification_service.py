"""NotificationService: best-effort calendar and e-mail side effects.

Called only after the appointment write has been committed. Provider
failures are caught here and written into the SideEffectReport; they never
propagate to the lifecycle operation that triggered them. Each step is tried
once, with no retry.
"""
from __future__ import annotations

import asyncio
import datetime as _dt
import logging
from typing import Any, Callable, Dict, Optional

from inkform.config.notifications import NotificationConfig
from inkform.core.exceptions import ConfigurationError
from inkform.infra.database.models.appointment import Appointment
from inkform.infra.database.models.studio import Studio
from inkform.infra.database.repositories.appointment import AppointmentRepository
from inkform.integrations.base import CalendarProvider, MailTransport
from inkform.integrations.google_calendar import GoogleCalendarProvider
from inkform.integrations.smtp_mailer import SMTPMailTransport
from inkform.lifecycle.types import EmailTemplate, NotifyOptions, SideEffectReport, StepOutcome
from inkform.services.email_templates import format_eur, render as render_email

logger = logging.getLogger(__name__)

EVENT_DURATION = _dt.timedelta(hours=2)
# (method, minutes before start)
EVENT_REMINDERS = (("email", 24 * 60), ("popup", 60))
DEFAULT_SMTP_PORT = 587

CalendarFactory = Callable[[str, str], CalendarProvider]
MailFactory = Callable[[Studio, NotificationConfig], MailTransport]


def build_appointment_event(appointment: Appointment, timezone: str) -> Dict[str, Any]:
    """Calendar event body for an appointment: two hours, fixed reminders."""
    start = appointment.appointment_date
    end = start + EVENT_DURATION
    lines = [
        f"Client: {appointment.client_name}",
        f"Description: {appointment.description or ''}",
    ]
    if appointment.price:
        lines.append(f"Total Price: {format_eur(appointment.price)}")
    if appointment.deposit:
        lines.append(f"Deposit: {format_eur(appointment.deposit)}")
    return {
        "summary": f"Tattoo Appointment - {appointment.client_name}",
        "description": "\n".join(lines),
        "start": {"dateTime": start.isoformat(), "timeZone": timezone},
        "end": {"dateTime": end.isoformat(), "timeZone": timezone},
        "reminders": {
            "useDefault": False,
            "overrides": [{"method": m, "minutes": minutes} for m, minutes in EVENT_REMINDERS],
        },
    }


def default_calendar_factory(credentials_json: str, calendar_id: str) -> CalendarProvider:
    return GoogleCalendarProvider(credentials_json, calendar_id=calendar_id)


def default_mail_factory(studio: Studio, config: NotificationConfig) -> MailTransport:
    if not studio.email_smtp_host:
        raise ConfigurationError("Studio has no SMTP host configured")
    from_address = studio.email_from or config.email_from_fallback
    return SMTPMailTransport(
        host=studio.email_smtp_host,
        port=studio.email_smtp_port or DEFAULT_SMTP_PORT,
        username=studio.email_smtp_user,
        password=studio.email_smtp_pass,
        from_address=f"{studio.name} <{from_address}>",
        timeout=config.smtp_timeout_seconds,
    )


class NotificationService:
    def __init__(
        self,
        store: AppointmentRepository,
        config: Optional[NotificationConfig] = None,
        *,
        calendar_factory: CalendarFactory = default_calendar_factory,
        mail_factory: MailFactory = default_mail_factory,
    ) -> None:
        self._store = store
        self._config = config or NotificationConfig()
        self._calendar_factory = calendar_factory
        self._mail_factory = mail_factory

    async def notify(
        self,
        studio: Studio,
        appointment: Appointment,
        options: NotifyOptions,
        template: EmailTemplate = EmailTemplate.CONFIRMATION,
    ) -> SideEffectReport:
        """Run the requested side effects concurrently and report each outcome."""
        calendar, email = await asyncio.gather(
            self._calendar_step(studio, appointment, options),
            self._email_step(studio, appointment, options, template),
        )
        report = SideEffectReport(calendar=calendar, email=email)
        if report.has_failures:
            logger.warning(
                "NotificationService: partial failure for appointment %s: %s",
                appointment.id, report.to_dict(),
                extra={"studio_id": studio.id, "appointment_id": appointment.id},
            )
        return report

    async def _calendar_step(
        self, studio: Studio, appointment: Appointment, options: NotifyOptions
    ) -> StepOutcome:
        if not options.add_to_calendar:
            return StepOutcome.skipped("not requested")
        if not studio.calendar_integration_enabled:
            return StepOutcome.skipped("calendar integration disabled")
        if not studio.google_calendar_credentials:
            return StepOutcome.skipped("no calendar credentials")

        try:
            provider = self._calendar_factory(
                studio.google_calendar_credentials, self._config.calendar_id
            )
            created = await provider.create_event(
                build_appointment_event(appointment, self._config.timezone)
            )
            event_id = created.get("id")
            if not event_id:
                raise ValueError("calendar provider returned no event id")
        except Exception as exc:
            logger.warning(
                "NotificationService: calendar event failed for %s: %s",
                appointment.id, exc,
                extra={"studio_id": studio.id, "appointment_id": appointment.id},
            )
            return StepOutcome.failure(f"{exc.__class__.__name__}: {exc}")

        await self._store.record_calendar_event(appointment.id, event_id)
        return StepOutcome.succeeded(event_id)

    async def _email_step(
        self,
        studio: Studio,
        appointment: Appointment,
        options: NotifyOptions,
        template: EmailTemplate,
    ) -> StepOutcome:
        if not options.send_email:
            return StepOutcome.skipped("not requested")
        if not appointment.client_email:
            return StepOutcome.skipped("no client email")
        if not studio.email_notifications_enabled:
            return StepOutcome.skipped("email notifications disabled")

        try:
            transport = self._mail_factory(studio, self._config)
            subject, html = render_email(template, appointment, studio, self._config.zone)
            message_id = await transport.send(appointment.client_email, subject, html)
        except Exception as exc:
            logger.warning(
                "NotificationService: %s e-mail failed for %s: %s",
                EmailTemplate(template).value, appointment.id, exc,
                extra={"studio_id": studio.id, "appointment_id": appointment.id},
            )
            return StepOutcome.failure(f"{exc.__class__.__name__}: {exc}")

        logger.info(
            "NotificationService: %s e-mail sent for %s",
            EmailTemplate(template).value, appointment.id,
            extra={"studio_id": studio.id, "appointment_id": appointment.id},
        )
        return StepOutcome.succeeded(message_id)

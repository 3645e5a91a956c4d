"""AppointmentService: the lifecycle controller behind every studio action.

Each operation validates against the transition rules, performs one
authoritative write through AppointmentRepository, commits, and only then
runs side effects. Errors from the write abort the operation; side-effect
errors end up in the returned SideEffectReport.
"""
from __future__ import annotations

import datetime as _dt
import logging
from decimal import Decimal, InvalidOperation
from typing import Any, List, Mapping, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from inkform.config.notifications import NotificationConfig
from inkform.core.exceptions import (
    InvalidAmountError,
    InvalidDateError,
    MissingClientNameError,
    NotFoundError,
    PersistenceError,
)
from inkform.infra.database.models.appointment import Appointment
from inkform.infra.database.models.intake_form import IntakeForm
from inkform.infra.database.repositories.appointment import AppointmentRepository
from inkform.infra.database.repositories.intake_form import IntakeFormRepository
from inkform.infra.database.repositories.studio import StudioRepository
from inkform.lifecycle.transitions import (
    cancel_targets,
    check_in_target,
    ensure_status_change,
    mark_paid_target,
)
from inkform.lifecycle.types import (
    AppointmentStatus,
    BookingDraft,
    BookingResult,
    EmailTemplate,
    NotifyOptions,
    PaymentStatus,
    SideEffectReport,
)
from inkform.services.intake_validator import IntakeValidator
from inkform.services.notification_service import (
    CalendarFactory,
    MailFactory,
    NotificationService,
    default_calendar_factory,
    default_mail_factory,
)

logger = logging.getLogger(__name__)

# Largest value a Numeric(10, 2) column holds
MAX_AMOUNT = Decimal("99999999.99")


def _to_amount(value: Any, field_name: str) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        amount = Decimal(str(value))
        if not amount.is_finite() or amount < 0:
            raise InvalidAmountError(
                f"{field_name} must be zero or positive", details={"field": field_name}
            )
        if amount > MAX_AMOUNT:
            raise InvalidAmountError(
                f"{field_name} must not exceed {MAX_AMOUNT}",
                details={"field": field_name, "max": str(MAX_AMOUNT)},
            )
        return amount.quantize(Decimal("0.01"))
    except (InvalidOperation, ValueError) as exc:
        raise InvalidAmountError(
            f"{field_name} must be a number", details={"field": field_name}, cause=exc
        ) from exc


def normalize_draft(draft: BookingDraft) -> BookingDraft:
    """Check the required booking fields and return a cleaned copy."""
    name = (draft.client_name or "").strip()
    if not name:
        raise MissingClientNameError("Client name is required")
    when = draft.appointment_date
    if not isinstance(when, _dt.datetime) or when.tzinfo is None or when.utcoffset() is None:
        raise InvalidDateError("Appointment date must be a timezone-aware datetime")
    return BookingDraft(
        client_name=name,
        appointment_date=when,
        description=(draft.description or "").strip(),
        client_email=(draft.client_email or "").strip() or None,
        price=_to_amount(draft.price, "price"),
        deposit=_to_amount(draft.deposit, "deposit"),
        deposit_paid=bool(draft.deposit_paid),
    )


class AppointmentService:
    def __init__(
        self,
        session: AsyncSession,
        studio_id: UUID,
        *,
        notification_config: Optional[NotificationConfig] = None,
        calendar_factory: CalendarFactory = default_calendar_factory,
        mail_factory: MailFactory = default_mail_factory,
        validator: Optional[IntakeValidator] = None,
    ) -> None:
        self._session = session
        self._studio_id = studio_id
        self._repo = AppointmentRepository(session, studio_id)
        self._intakes = IntakeFormRepository(session, studio_id)
        self._studios = StudioRepository(session)
        self._notifier = NotificationService(
            self._repo,
            notification_config,
            calendar_factory=calendar_factory,
            mail_factory=mail_factory,
        )
        self._validator = validator or IntakeValidator()

    def _log_extra(self, appointment_id: Optional[UUID] = None, operation: str = "") -> dict:
        return {
            "studio_id": self._studio_id,
            "appointment_id": appointment_id,
            "operation": operation or None,
        }

    async def _commit(self) -> None:
        try:
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            logger.error("AppointmentService: commit failed", exc_info=True)
            raise PersistenceError("Could not save the change", cause=exc) from exc

    async def _commit_annex(self) -> None:
        """Commit best-effort writes made by side effects (calendar event id)."""
        try:
            await self._session.commit()
        except SQLAlchemyError as exc:
            await self._session.rollback()
            logger.warning("AppointmentService: side-effect annex not saved: %s", exc)

    async def _write(self, coro):
        """Await a store write, rolling the session back if storage failed."""
        try:
            return await coro
        except PersistenceError:
            await self._session.rollback()
            raise

    # ── Operations ───────────────────────────────────────────────────────────

    async def book_appointment(
        self,
        draft: BookingDraft,
        options: Optional[NotifyOptions] = None,
    ) -> BookingResult:
        """Create a scheduled appointment, then try calendar and confirmation e-mail."""
        options = options or NotifyOptions()
        draft = normalize_draft(draft)
        studio = await self._studios.get_required(self._studio_id)

        appt = await self._write(self._repo.create(draft))
        await self._commit()
        logger.info(
            "AppointmentService: booked %s for %s",
            appt.id, appt.appointment_date.isoformat(),
            extra=self._log_extra(appt.id, "book"),
        )

        report = await self._notifier.notify(studio, appt, options, EmailTemplate.CONFIRMATION)
        if report.calendar.ok:
            await self._commit_annex()
        return BookingResult(appointment_id=appt.id, side_effect_report=report)

    async def check_in(
        self,
        appointment_id: UUID,
        raw_answers: Mapping[str, Any],
        *,
        client_signature: Optional[str],
        practitioner_signature: Optional[str],
        place: Optional[str],
    ) -> IntakeForm:
        """Validate the anamnesis form and move a scheduled appointment to checked_in."""
        appt = await self._repo.get_required(appointment_id)
        check_in_target(appt.status)
        form = self._validator.validate(raw_answers, client_signature, practitioner_signature, place)

        intake = await self._write(self._repo.attach_intake(appointment_id, form))
        await self._commit()
        logger.info(
            "AppointmentService: %s checked in", appointment_id,
            extra=self._log_extra(appointment_id, "check_in"),
        )
        return intake

    async def mark_fully_paid(self, appointment_id: UUID) -> None:
        appt = await self._repo.get_required(appointment_id)
        if mark_paid_target(appt.payment_status) is None:
            logger.debug("AppointmentService: %s already fully paid", appointment_id)
            return
        await self._write(self._repo.mark_fully_paid(appointment_id))
        await self._commit()
        logger.info(
            "AppointmentService: %s marked fully paid", appointment_id,
            extra=self._log_extra(appointment_id, "mark_paid"),
        )

    async def cancel_appointment(
        self,
        appointment_id: UUID,
        *,
        notify_client: bool = False,
    ) -> Optional[SideEffectReport]:
        """Cancel status and payment together.

        Cancelling twice is a no-op. With ``notify_client`` the cancellation
        e-mail is attempted after the commit and its report is returned.
        """
        appt = await self._repo.get_required(appointment_id)
        if cancel_targets(appt.status) is None:
            logger.debug("AppointmentService: %s already cancelled", appointment_id)
            return None

        changed = await self._write(self._repo.cancel(appointment_id))
        await self._commit()
        if not changed:
            return None
        logger.info(
            "AppointmentService: %s cancelled", appointment_id,
            extra=self._log_extra(appointment_id, "cancel"),
        )

        if not notify_client:
            return None
        studio = await self._studios.get_required(self._studio_id)
        return await self._notifier.notify(
            studio, appt, NotifyOptions(send_email=True), EmailTemplate.CANCELLATION
        )

    async def send_reminder(self, appointment_id: UUID) -> SideEffectReport:
        """E-mail the reminder template for an appointment that is still scheduled."""
        appt = await self._repo.get_required(appointment_id)
        # Only appointments that can still be checked in get reminders
        ensure_status_change(appt.status, AppointmentStatus.CHECKED_IN)
        studio = await self._studios.get_required(self._studio_id)
        return await self._notifier.notify(
            studio, appt, NotifyOptions(send_email=True), EmailTemplate.REMINDER
        )

    # ── Reads ────────────────────────────────────────────────────────────────

    async def get_appointment(self, appointment_id: UUID) -> Appointment:
        return await self._repo.get_required(appointment_id)

    async def list_appointments(
        self,
        *,
        status: Optional[AppointmentStatus] = None,
        payment_status: Optional[PaymentStatus] = None,
        date_from: Optional[_dt.datetime] = None,
        date_to: Optional[_dt.datetime] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Appointment]:
        return await self._repo.list_all(
            status=status,
            payment_status=payment_status,
            date_from=date_from,
            date_to=date_to,
            skip=skip,
            limit=limit,
        )

    async def get_intake_form(self, appointment_id: UUID) -> IntakeForm:
        intake = await self._intakes.get_by_appointment(appointment_id)
        if intake is None:
            raise NotFoundError(
                "No intake form for this appointment",
                details={"appointment_id": str(appointment_id)},
            )
        return intake

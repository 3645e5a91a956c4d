"""Appointment repository: the authoritative record store.

Status and payment columns change only through the transition methods here.
Each transition is a single conditional UPDATE ("set X where status is still
Y"), so a racing duplicate request matches zero rows instead of overwriting.
"""
from __future__ import annotations

import datetime as _dt
import logging
from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from inkform.core.exceptions import (
    DuplicateIntakeError,
    InvalidStateError,
    NotFoundError,
    PersistenceError,
)
from inkform.infra.database.models.appointment import Appointment
from inkform.infra.database.models.intake_form import IntakeForm
from inkform.infra.database.repositories.base import BaseRepository
from inkform.infra.database.repositories.intake_form import IntakeFormRepository
from inkform.lifecycle.transitions import initial_payment_status
from inkform.lifecycle.types import (
    AppointmentStatus,
    BookingDraft,
    IntakeFormData,
    PaymentStatus,
)

logger = logging.getLogger(__name__)


class _GuardMissed(Exception):
    """Conditional UPDATE matched no row; rolls back the enclosing savepoint."""


class AppointmentRepository(BaseRepository[Appointment]):
    model = Appointment

    def __init__(self, session: AsyncSession, studio_id: UUID) -> None:
        super().__init__(session)
        self.studio_id = studio_id
        self._intakes = IntakeFormRepository(session, studio_id)

    # ── Reads ────────────────────────────────────────────────────────────────

    async def get(self, appointment_id: UUID) -> Optional[Appointment]:
        stmt = select(Appointment).where(
            Appointment.id == appointment_id,
            Appointment.studio_id == self.studio_id,
        )
        result = await self._execute(stmt, "Could not load the appointment")
        return result.scalar_one_or_none()

    async def get_required(self, appointment_id: UUID) -> Appointment:
        appt = await self.get(appointment_id)
        if appt is None:
            raise NotFoundError(
                "Appointment not found", details={"appointment_id": str(appointment_id)}
            )
        return appt

    async def list_all(
        self,
        *,
        status: Optional[AppointmentStatus] = None,
        payment_status: Optional[PaymentStatus] = None,
        date_from: Optional[_dt.datetime] = None,
        date_to: Optional[_dt.datetime] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[Appointment]:
        stmt = (
            select(Appointment)
            .where(Appointment.studio_id == self.studio_id)
            .order_by(Appointment.appointment_date.desc())
        )
        if status:
            stmt = stmt.where(Appointment.status == status)
        if payment_status:
            stmt = stmt.where(Appointment.payment_status == payment_status)
        if date_from:
            stmt = stmt.where(Appointment.appointment_date >= date_from)
        if date_to:
            stmt = stmt.where(Appointment.appointment_date <= date_to)
        stmt = stmt.offset(skip).limit(limit)
        result = await self._execute(stmt, "Could not list appointments")
        return list(result.scalars().all())

    async def _current_status(self, appointment_id: UUID) -> Optional[tuple]:
        stmt = select(Appointment.status, Appointment.payment_status).where(
            Appointment.id == appointment_id,
            Appointment.studio_id == self.studio_id,
        )
        result = await self._execute(stmt, "Could not read the appointment status")
        return result.first()

    # ── Transitions ──────────────────────────────────────────────────────────

    async def create(self, draft: BookingDraft) -> Appointment:  # type: ignore[override]
        data: dict[str, Any] = {
            "studio_id": self.studio_id,
            "client_name": draft.client_name,
            "client_email": draft.client_email or None,
            "appointment_date": draft.appointment_date,
            "description": draft.description or "",
            "price": draft.price,
            "deposit": draft.deposit,
            "deposit_paid": draft.deposit_paid,
            "status": AppointmentStatus.SCHEDULED,
            "payment_status": initial_payment_status(draft.deposit_paid),
        }
        appt = await super().create(data)
        logger.info(
            "AppointmentRepository: inserted appointment %s (%s)",
            appt.id, appt.payment_status.value,
            extra={"studio_id": self.studio_id, "appointment_id": appt.id},
        )
        return appt

    async def attach_intake(self, appointment_id: UUID, form: IntakeFormData) -> IntakeForm:
        """Insert the intake form and flip status to checked_in in one savepoint.

        If the status guard matches no row the savepoint is rolled back, so the
        form insert disappears with it.
        """
        if await self._intakes.exists_for(appointment_id):
            raise DuplicateIntakeError(
                "An intake form already exists for this appointment",
                details={"appointment_id": str(appointment_id)},
            )
        try:
            async with self.session.begin_nested():
                intake = IntakeForm(appointment_id=appointment_id, **form.to_row())
                self.session.add(intake)
                await self.session.flush()
                result = await self.session.execute(
                    update(Appointment)
                    .where(
                        Appointment.id == appointment_id,
                        Appointment.studio_id == self.studio_id,
                        Appointment.status == AppointmentStatus.SCHEDULED,
                    )
                    .values(status=AppointmentStatus.CHECKED_IN)
                    .execution_options(synchronize_session="fetch")
                )
                if result.rowcount != 1:
                    raise _GuardMissed()
        except _GuardMissed:
            await self._raise_for_missed_guard(appointment_id, AppointmentStatus.CHECKED_IN)
        except IntegrityError as exc:
            raise DuplicateIntakeError(
                "An intake form already exists for this appointment",
                details={"appointment_id": str(appointment_id)},
                cause=exc,
            ) from exc
        except SQLAlchemyError as exc:
            raise PersistenceError("Could not store the intake form", cause=exc) from exc

        logger.info(
            "AppointmentRepository: appointment %s checked in",
            appointment_id,
            extra={"studio_id": self.studio_id, "appointment_id": appointment_id},
        )
        return intake

    async def mark_fully_paid(self, appointment_id: UUID) -> None:
        """Set payment_status to fully_paid. Repeating it is not an error."""
        result = await self._execute(
            update(Appointment)
            .where(
                Appointment.id == appointment_id,
                Appointment.studio_id == self.studio_id,
                Appointment.payment_status != PaymentStatus.CANCELLED,
            )
            .values(payment_status=PaymentStatus.FULLY_PAID)
            .execution_options(synchronize_session="fetch"),
            "Could not update the payment status",
        )
        if result.rowcount == 0:
            await self._raise_for_missed_guard(appointment_id, PaymentStatus.FULLY_PAID)

    async def cancel(self, appointment_id: UUID) -> bool:
        """Cancel status and payment together. Returns False if already cancelled."""
        result = await self._execute(
            update(Appointment)
            .where(
                Appointment.id == appointment_id,
                Appointment.studio_id == self.studio_id,
                Appointment.status != AppointmentStatus.CANCELLED,
            )
            .values(status=AppointmentStatus.CANCELLED, payment_status=PaymentStatus.CANCELLED)
            .execution_options(synchronize_session="fetch"),
            "Could not cancel the appointment",
        )
        if result.rowcount == 0:
            if await self._current_status(appointment_id) is None:
                raise NotFoundError(
                    "Appointment not found", details={"appointment_id": str(appointment_id)}
                )
            return False
        return True

    async def record_calendar_event(self, appointment_id: UUID, event_id: str) -> bool:
        """Store the provider event id. Never raises; failure is only logged."""
        try:
            async with self.session.begin_nested():
                await self.session.execute(
                    update(Appointment)
                    .where(
                        Appointment.id == appointment_id,
                        Appointment.studio_id == self.studio_id,
                    )
                    .values(calendar_event_id=event_id)
                    .execution_options(synchronize_session="fetch")
                )
        except SQLAlchemyError as exc:
            logger.warning(
                "AppointmentRepository: could not record calendar event %s for %s: %s",
                event_id, appointment_id, exc,
                extra={"studio_id": self.studio_id, "appointment_id": appointment_id},
            )
            return False
        return True

    # ── Helpers ──────────────────────────────────────────────────────────────

    async def _raise_for_missed_guard(self, appointment_id: UUID, requested) -> None:
        """Explain why a conditional UPDATE matched nothing: unknown id or wrong state."""
        row = await self._current_status(appointment_id)
        if row is None:
            raise NotFoundError(
                "Appointment not found", details={"appointment_id": str(appointment_id)}
            )
        status, payment_status = row
        current = payment_status if isinstance(requested, PaymentStatus) else status
        raise InvalidStateError(
            f"Appointment is {current.value}; cannot move to {requested.value}",
            current=current.value,
            requested=requested.value,
        )

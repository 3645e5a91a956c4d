"""Intake form repository: studio-scoped reads of anamnesis forms."""
from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from inkform.infra.database.models.appointment import Appointment
from inkform.infra.database.models.intake_form import IntakeForm
from inkform.infra.database.repositories.base import BaseRepository


class IntakeFormRepository(BaseRepository[IntakeForm]):
    model = IntakeForm

    def __init__(self, session: AsyncSession, studio_id: UUID) -> None:
        super().__init__(session)
        self.studio_id = studio_id

    async def get_by_appointment(self, appointment_id: UUID) -> Optional[IntakeForm]:
        stmt = (
            select(IntakeForm)
            .join(Appointment, Appointment.id == IntakeForm.appointment_id)
            .where(
                IntakeForm.appointment_id == appointment_id,
                Appointment.studio_id == self.studio_id,
            )
        )
        result = await self._execute(stmt, "Could not load the intake form")
        return result.scalar_one_or_none()

    async def exists_for(self, appointment_id: UUID) -> bool:
        stmt = select(IntakeForm.id).where(IntakeForm.appointment_id == appointment_id).limit(1)
        result = await self._execute(stmt, "Could not check for an existing intake form")
        return result.scalar() is not None

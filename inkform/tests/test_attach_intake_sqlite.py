"""attach_intake against a real engine (in-memory SQLite via aiosqlite).

The savepoint must take the intake insert with it when the status guard
misses, so a refused check-in leaves no orphan form behind.
"""
from __future__ import annotations

import asyncio
import datetime as _dt
import unittest

from sqlalchemy import event, func, select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from inkform.core.exceptions import DuplicateIntakeError, InvalidStateError
from inkform.infra.database.models import Appointment, Base, IntakeForm, Studio
from inkform.infra.database.repositories.appointment import AppointmentRepository
from inkform.lifecycle.types import (
    DETAIL_FIELDS,
    INTAKE_QUESTIONS,
    AppointmentStatus,
    BookingDraft,
    IntakeFormData,
    PaymentStatus,
)


def _run(coro):
    return asyncio.run(coro)


def _form() -> IntakeFormData:
    return IntakeFormData(
        answers={q: False for q in INTAKE_QUESTIONS},
        details={col: None for col in DETAIL_FIELDS.values()},
        place="Lyon",
        client_signature="data:image/png;base64,AAA",
        practitioner_signature="data:image/png;base64,BBB",
        signature_date=_dt.datetime(2026, 5, 1, 12, 0, tzinfo=_dt.timezone.utc),
    )


def _engine():
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)

    # pysqlite only honours SAVEPOINT when SQLAlchemy emits BEGIN itself
    @event.listens_for(engine.sync_engine, "connect")
    def _no_implicit_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _explicit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine


async def _with_booking(scenario):
    """Create schema, one studio and one scheduled appointment, then run scenario."""
    engine = _engine()
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        async with AsyncSession(engine, expire_on_commit=False) as session:
            studio = Studio(name="Black Lotus Tattoo")
            session.add(studio)
            await session.commit()

            repo = AppointmentRepository(session, studio.id)
            appt = await repo.create(BookingDraft(
                client_name="Jane Doe",
                appointment_date=_dt.datetime(2026, 5, 1, 14, 0, tzinfo=_dt.timezone.utc),
            ))
            await session.commit()
            return await scenario(session, repo, appt.id)
    finally:
        await engine.dispose()


async def _intake_count(session) -> int:
    result = await session.execute(select(func.count()).select_from(IntakeForm))
    return result.scalar_one()


async def _status(session, appointment_id):
    result = await session.execute(
        select(Appointment.status, Appointment.payment_status).where(Appointment.id == appointment_id)
    )
    return tuple(result.one())


class TestAttachIntakeOnRealEngine(unittest.TestCase):
    def test_check_in_stores_form_and_status_together(self):
        async def scenario(session, repo, appointment_id):
            await repo.attach_intake(appointment_id, _form())
            await session.commit()
            return await _intake_count(session), await _status(session, appointment_id)

        count, status = _run(_with_booking(scenario))

        self.assertEqual(count, 1)
        self.assertEqual(status, (AppointmentStatus.CHECKED_IN, PaymentStatus.PENDING))

    def test_refused_check_in_leaves_no_form(self):
        async def scenario(session, repo, appointment_id):
            await repo.cancel(appointment_id)
            await session.commit()
            with self.assertRaises(InvalidStateError):
                await repo.attach_intake(appointment_id, _form())
            # The outer transaction survives the rolled-back savepoint
            await session.commit()
            return await _intake_count(session), await _status(session, appointment_id)

        count, status = _run(_with_booking(scenario))

        self.assertEqual(count, 0)
        self.assertEqual(status, (AppointmentStatus.CANCELLED, PaymentStatus.CANCELLED))

    def test_second_check_in_is_duplicate(self):
        async def scenario(session, repo, appointment_id):
            await repo.attach_intake(appointment_id, _form())
            await session.commit()
            with self.assertRaises(DuplicateIntakeError):
                await repo.attach_intake(appointment_id, _form())
            return await _intake_count(session)

        self.assertEqual(_run(_with_booking(scenario)), 1)


if __name__ == "__main__":
    unittest.main()

"""Appointment ORM model."""
from __future__ import annotations

import datetime as _dt
import uuid
from decimal import Decimal
from typing import Optional

from sqlalchemy import Boolean, DateTime, Enum, ForeignKey, Index, Numeric, String, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from inkform.infra.database.models.base import Base, TimestampMixin, _uuid_pk
from inkform.lifecycle.types import AppointmentStatus, PaymentStatus


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Appointment(Base, TimestampMixin):
    """A booked tattoo session. Never deleted; cancellation is a status."""

    __tablename__ = "appointments"
    __table_args__ = (
        Index("ix_appointments_studio_date", "studio_id", "appointment_date"),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()
    studio_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("studios.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )

    client_name: Mapped[str] = mapped_column(Text, nullable=False)
    client_email: Mapped[Optional[str]] = mapped_column(String(320), nullable=True)
    appointment_date: Mapped[_dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    deposit: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    deposit_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    # Written only through AppointmentRepository transition methods
    status: Mapped[AppointmentStatus] = mapped_column(
        Enum(
            AppointmentStatus,
            name="appointment_status",
            native_enum=False,
            length=32,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=AppointmentStatus.SCHEDULED,
    )
    payment_status: Mapped[PaymentStatus] = mapped_column(
        Enum(
            PaymentStatus,
            name="payment_status",
            native_enum=False,
            length=32,
            values_callable=_enum_values,
        ),
        nullable=False,
        default=PaymentStatus.PENDING,
    )

    # Set only when the calendar side effect succeeded
    calendar_event_id: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)

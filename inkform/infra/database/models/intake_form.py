"""Anamnesis (intake) form ORM model: 20 health answers plus two signatures."""
from __future__ import annotations

import datetime as _dt
import uuid
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from inkform.infra.database.models.base import Base, TimestampMixin, _uuid_pk


class IntakeForm(Base, TimestampMixin):
    """Exists iff the appointment is checked in. No update path."""

    __tablename__ = "anamnesis_forms"

    id: Mapped[uuid.UUID] = _uuid_pk()
    appointment_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("appointments.id", ondelete="RESTRICT"),
        nullable=False,
        unique=True,
    )

    is_pregnant: Mapped[bool] = mapped_column(Boolean, nullable=False)
    has_consumed_alcohol_or_drugs: Mapped[bool] = mapped_column(Boolean, nullable=False)
    has_allergies: Mapped[bool] = mapped_column(Boolean, nullable=False)
    allergies_details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    has_been_tattooed_before: Mapped[bool] = mapped_column(Boolean, nullable=False)
    tattooed_area_details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_undergoing_heavy_treatment: Mapped[bool] = mapped_column(Boolean, nullable=False)
    heavy_treatment_details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_allergic_to_iodine: Mapped[bool] = mapped_column(Boolean, nullable=False)
    has_history_of_infection: Mapped[bool] = mapped_column(Boolean, nullable=False)
    has_active_skin_disease: Mapped[bool] = mapped_column(Boolean, nullable=False)
    has_autoimmune_disease: Mapped[bool] = mapped_column(Boolean, nullable=False)
    has_immunodeficiency_disease: Mapped[bool] = mapped_column(Boolean, nullable=False)
    takes_anticoagulants_or_has_cardiovascular_issues: Mapped[bool] = mapped_column(Boolean, nullable=False)
    cardiovascular_details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    has_pacemaker: Mapped[bool] = mapped_column(Boolean, nullable=False)
    has_epilepsy: Mapped[bool] = mapped_column(Boolean, nullable=False)
    has_diabetes: Mapped[bool] = mapped_column(Boolean, nullable=False)
    has_herpes: Mapped[bool] = mapped_column(Boolean, nullable=False)
    has_asthma: Mapped[bool] = mapped_column(Boolean, nullable=False)
    has_conjunctivitis: Mapped[bool] = mapped_column(Boolean, nullable=False)
    is_on_accutane_treatment: Mapped[bool] = mapped_column(Boolean, nullable=False)
    has_taken_aspirin_or_anti_inflammatories: Mapped[bool] = mapped_column(Boolean, nullable=False)
    has_wound_healing_issues: Mapped[bool] = mapped_column(Boolean, nullable=False)

    place: Mapped[str] = mapped_column(Text, nullable=False)
    signature_date: Mapped[_dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    # PNG data URLs from the signature canvas
    client_signature: Mapped[str] = mapped_column(Text, nullable=False)
    practitioner_signature: Mapped[str] = mapped_column(Text, nullable=False)

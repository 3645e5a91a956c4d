"""Studio ORM model: the tenant that owns appointments and its notification settings."""
from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import Boolean, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from inkform.infra.database.models.base import Base, TimestampMixin, _uuid_pk


class Studio(Base, TimestampMixin):
    """Created by onboarding; the lifecycle only reads it."""

    __tablename__ = "studios"

    id: Mapped[uuid.UUID] = _uuid_pk()
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    phone: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    # Google Calendar: service-account or OAuth token JSON
    calendar_integration_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    google_calendar_credentials: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Outbound SMTP, one account per studio
    email_notifications_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    email_smtp_host: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    email_smtp_port: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    email_smtp_user: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    email_smtp_pass: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    email_from: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

"""
inkform.infra.database.models – SQLAlchemy 2.0 ORM models.

Exports Base, mixins, and all model classes.
"""
from inkform.infra.database.models.appointment import Appointment
from inkform.infra.database.models.base import Base, TimestampMixin, _uuid_pk
from inkform.infra.database.models.intake_form import IntakeForm
from inkform.infra.database.models.studio import Studio

__all__ = [
    "Base",
    "TimestampMixin",
    "_uuid_pk",
    "Studio",
    "Appointment",
    "IntakeForm",
]

"""Repositories for the inkform database."""
from inkform.infra.database.repositories.appointment import AppointmentRepository
from inkform.infra.database.repositories.base import BaseRepository
from inkform.infra.database.repositories.intake_form import IntakeFormRepository
from inkform.infra.database.repositories.studio import StudioRepository

__all__ = [
    "BaseRepository",
    "StudioRepository",
    "AppointmentRepository",
    "IntakeFormRepository",
]

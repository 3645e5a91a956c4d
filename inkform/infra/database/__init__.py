"""
inkform.infra.database – PostgreSQL async engine, session, models and repositories.

Public API
──────────
  build_engine, build_session_factory, init_db, close_engine, ensure_database_exists
  Base, Studio, Appointment, IntakeForm (models)
  StudioRepository, AppointmentRepository, IntakeFormRepository
"""
from inkform.infra.database.engine import (
    build_engine,
    build_session_factory,
    close_engine,
    ensure_database_exists,
    init_db,
)
from inkform.infra.database.models import Appointment, Base, IntakeForm, Studio
from inkform.infra.database.repositories import (
    AppointmentRepository,
    IntakeFormRepository,
    StudioRepository,
)

__all__ = [
    "build_engine",
    "build_session_factory",
    "init_db",
    "close_engine",
    "ensure_database_exists",
    "Base",
    "Studio",
    "Appointment",
    "IntakeForm",
    "StudioRepository",
    "AppointmentRepository",
    "IntakeFormRepository",
]

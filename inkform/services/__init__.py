"""Service layer: lifecycle controller, intake validation and notifications."""
from inkform.services.appointment_service import AppointmentService
from inkform.services.intake_validator import IntakeValidator, validate_intake
from inkform.services.notification_service import NotificationService

__all__ = [
    "AppointmentService",
    "IntakeValidator",
    "validate_intake",
    "NotificationService",
]

"""Appointment lifecycle: closed status enums, transition rules and value objects."""
from inkform.lifecycle.transitions import (
    can_change_payment,
    can_change_status,
    cancel_targets,
    check_in_target,
    ensure_status_change,
    initial_payment_status,
    mark_paid_target,
)
from inkform.lifecycle.types import (
    DETAIL_FIELDS,
    INTAKE_QUESTIONS,
    AppointmentStatus,
    BookingDraft,
    BookingResult,
    EmailTemplate,
    IntakeFormData,
    NotifyOptions,
    PaymentStatus,
    SideEffectReport,
    StepOutcome,
)

__all__ = [
    "AppointmentStatus",
    "PaymentStatus",
    "EmailTemplate",
    "INTAKE_QUESTIONS",
    "DETAIL_FIELDS",
    "BookingDraft",
    "NotifyOptions",
    "StepOutcome",
    "SideEffectReport",
    "BookingResult",
    "IntakeFormData",
    "can_change_status",
    "can_change_payment",
    "ensure_status_change",
    "initial_payment_status",
    "check_in_target",
    "mark_paid_target",
    "cancel_targets",
]

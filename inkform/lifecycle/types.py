"""Core data structures for the appointment lifecycle."""
from __future__ import annotations

import datetime as _dt
from dataclasses import asdict, dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional
from uuid import UUID


class AppointmentStatus(str, Enum):
    SCHEDULED = "scheduled"
    CHECKED_IN = "checked_in"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    DEPOSIT_PAID = "deposit_paid"
    FULLY_PAID = "fully_paid"
    CANCELLED = "cancelled"


class EmailTemplate(str, Enum):
    """The three fixed client e-mails."""
    CONFIRMATION = "confirmation"
    REMINDER = "reminder"
    CANCELLATION = "cancellation"


# Question keys in form order (1..20); they double as anamnesis_forms column names.
INTAKE_QUESTIONS: tuple[str, ...] = (
    "is_pregnant",
    "has_consumed_alcohol_or_drugs",
    "has_allergies",
    "has_been_tattooed_before",
    "is_undergoing_heavy_treatment",
    "is_allergic_to_iodine",
    "has_history_of_infection",
    "has_active_skin_disease",
    "has_autoimmune_disease",
    "has_immunodeficiency_disease",
    "takes_anticoagulants_or_has_cardiovascular_issues",
    "has_pacemaker",
    "has_epilepsy",
    "has_diabetes",
    "has_herpes",
    "has_asthma",
    "has_conjunctivitis",
    "is_on_accutane_treatment",
    "has_taken_aspirin_or_anti_inflammatories",
    "has_wound_healing_issues",
)

# question key -> free-text column, only kept when the answer is yes
DETAIL_FIELDS: Dict[str, str] = {
    "has_allergies": "allergies_details",
    "has_been_tattooed_before": "tattooed_area_details",
    "is_undergoing_heavy_treatment": "heavy_treatment_details",
    "takes_anticoagulants_or_has_cardiovascular_issues": "cardiovascular_details",
}


@dataclass
class BookingDraft:
    """What the studio enters on the new-appointment screen."""
    client_name: str
    appointment_date: _dt.datetime
    description: str = ""
    client_email: Optional[str] = None
    price: Optional[Decimal] = None
    deposit: Optional[Decimal] = None
    deposit_paid: bool = False


@dataclass
class NotifyOptions:
    """Caller toggles for the best-effort side effects."""
    add_to_calendar: bool = False
    send_email: bool = False


@dataclass
class StepOutcome:
    """Result of one side-effect step.

    ``attempted`` is False when a precondition (toggle, studio setting,
    missing address) skipped the step; ``reference`` carries the provider
    event id or message id on success.
    """
    attempted: bool = False
    ok: bool = False
    error: Optional[str] = None
    reference: Optional[str] = None
    skipped_reason: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.attempted and not self.ok

    @classmethod
    def skipped(cls, reason: str) -> StepOutcome:
        return cls(attempted=False, ok=False, skipped_reason=reason)

    @classmethod
    def succeeded(cls, reference: Optional[str] = None) -> StepOutcome:
        return cls(attempted=True, ok=True, reference=reference)

    @classmethod
    def failure(cls, error: str) -> StepOutcome:
        return cls(attempted=True, ok=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SideEffectReport:
    calendar: StepOutcome = field(default_factory=lambda: StepOutcome.skipped("not requested"))
    email: StepOutcome = field(default_factory=lambda: StepOutcome.skipped("not requested"))

    @property
    def has_failures(self) -> bool:
        return self.calendar.failed or self.email.failed

    def to_dict(self) -> Dict[str, Any]:
        return {"calendar": self.calendar.to_dict(), "email": self.email.to_dict()}


@dataclass
class BookingResult:
    appointment_id: UUID
    side_effect_report: SideEffectReport


@dataclass(frozen=True)
class IntakeFormData:
    """A validated anamnesis form, ready to be stored."""
    answers: Dict[str, bool]
    details: Dict[str, Optional[str]]
    place: str
    client_signature: str
    practitioner_signature: str
    signature_date: _dt.datetime

    def to_row(self) -> Dict[str, Any]:
        """Column -> value mapping for the anamnesis_forms insert."""
        return {
            **self.answers,
            **self.details,
            "place": self.place,
            "client_signature": self.client_signature,
            "practitioner_signature": self.practitioner_signature,
            "signature_date": self.signature_date,
        }

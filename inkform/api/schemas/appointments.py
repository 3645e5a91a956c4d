"""Pydantic schemas for the appointments API."""
from __future__ import annotations

import datetime as _dt
from decimal import Decimal
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from inkform.lifecycle.types import AppointmentStatus, PaymentStatus


class AppointmentCreate(BaseModel):
    client_name: str = Field(..., min_length=1, max_length=255)
    client_email: Optional[str] = Field(None, max_length=320)
    appointment_date: _dt.datetime
    description: str = ""
    price: Optional[Decimal] = Field(None, ge=0)
    deposit: Optional[Decimal] = Field(None, ge=0)
    deposit_paid: bool = False
    add_to_calendar: bool = False
    send_email: bool = False


class StepOutcomeSchema(BaseModel):
    attempted: bool
    ok: bool
    error: Optional[str] = None
    reference: Optional[str] = None
    skipped_reason: Optional[str] = None


class SideEffectReportSchema(BaseModel):
    calendar: StepOutcomeSchema
    email: StepOutcomeSchema


class BookingResponse(BaseModel):
    appointment_id: UUID
    side_effect_report: SideEffectReportSchema


class AppointmentResponse(BaseModel):
    id: UUID
    client_name: str
    client_email: Optional[str] = None
    appointment_date: _dt.datetime
    description: str
    price: Optional[Decimal] = None
    deposit: Optional[Decimal] = None
    deposit_paid: bool
    status: AppointmentStatus
    payment_status: PaymentStatus
    calendar_event_id: Optional[str] = None
    created_at: Optional[_dt.datetime] = None
    updated_at: Optional[_dt.datetime] = None

    model_config = {"from_attributes": True}


class CheckInRequest(BaseModel):
    """Answers keyed by question (bool or "yes"/"no"), plus detail texts."""
    answers: Dict[str, Any] = Field(default_factory=dict)
    client_signature: Optional[str] = None
    practitioner_signature: Optional[str] = None
    place: Optional[str] = None


class IntakeFormResponse(BaseModel):
    appointment_id: UUID
    answers: Dict[str, bool]
    details: Dict[str, Optional[str]]
    place: str
    signature_date: _dt.datetime
    client_signature: str
    practitioner_signature: str


class CancelResponse(BaseModel):
    cancelled: bool
    side_effect_report: Optional[SideEffectReportSchema] = None

"""Appointments API: book, check in, mark paid, cancel, remind, and reads."""
from __future__ import annotations

import datetime as _dt
import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Response, status as http_status

from inkform.api.dependencies import get_appointment_service
from inkform.api.schemas.appointments import (
    AppointmentCreate,
    AppointmentResponse,
    BookingResponse,
    CancelResponse,
    CheckInRequest,
    IntakeFormResponse,
    SideEffectReportSchema,
)
from inkform.infra.database.models.intake_form import IntakeForm
from inkform.lifecycle.types import (
    DETAIL_FIELDS,
    INTAKE_QUESTIONS,
    AppointmentStatus,
    BookingDraft,
    NotifyOptions,
    PaymentStatus,
)
from inkform.services.appointment_service import AppointmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["appointments"])


def _intake_to_schema(intake: IntakeForm) -> IntakeFormResponse:
    return IntakeFormResponse(
        appointment_id=intake.appointment_id,
        answers={q: bool(getattr(intake, q)) for q in INTAKE_QUESTIONS},
        details={col: getattr(intake, col) for col in DETAIL_FIELDS.values()},
        place=intake.place,
        signature_date=intake.signature_date,
        client_signature=intake.client_signature,
        practitioner_signature=intake.practitioner_signature,
    )


# ── Endpoints ─────────────────────────────────────────────────────────────────

@router.post("", response_model=BookingResponse, status_code=http_status.HTTP_201_CREATED)
async def book_appointment(
    body: AppointmentCreate,
    svc: AppointmentService = Depends(get_appointment_service),
):
    """Create a scheduled appointment. Calendar and e-mail outcomes are in the report."""
    draft = BookingDraft(
        client_name=body.client_name,
        appointment_date=body.appointment_date,
        description=body.description,
        client_email=body.client_email,
        price=body.price,
        deposit=body.deposit,
        deposit_paid=body.deposit_paid,
    )
    options = NotifyOptions(add_to_calendar=body.add_to_calendar, send_email=body.send_email)
    result = await svc.book_appointment(draft, options)
    return BookingResponse(
        appointment_id=result.appointment_id,
        side_effect_report=SideEffectReportSchema(**result.side_effect_report.to_dict()),
    )


@router.get("", response_model=List[AppointmentResponse])
async def list_appointments(
    status: Optional[AppointmentStatus] = None,
    payment_status: Optional[PaymentStatus] = None,
    date_from: Optional[_dt.datetime] = Query(default=None),
    date_to: Optional[_dt.datetime] = Query(default=None),
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=500),
    svc: AppointmentService = Depends(get_appointment_service),
):
    """List the studio's appointments, newest date first."""
    items = await svc.list_appointments(
        status=status,
        payment_status=payment_status,
        date_from=date_from,
        date_to=date_to,
        skip=skip,
        limit=limit,
    )
    return [AppointmentResponse.model_validate(a) for a in items]


@router.get("/{appointment_id}", response_model=AppointmentResponse)
async def get_appointment(
    appointment_id: uuid.UUID,
    svc: AppointmentService = Depends(get_appointment_service),
):
    appt = await svc.get_appointment(appointment_id)
    return AppointmentResponse.model_validate(appt)


@router.post("/{appointment_id}/check-in", status_code=http_status.HTTP_204_NO_CONTENT)
async def check_in(
    appointment_id: uuid.UUID,
    body: CheckInRequest,
    svc: AppointmentService = Depends(get_appointment_service),
):
    """Submit the signed anamnesis form; the appointment becomes checked_in."""
    await svc.check_in(
        appointment_id,
        body.answers,
        client_signature=body.client_signature,
        practitioner_signature=body.practitioner_signature,
        place=body.place,
    )
    return Response(status_code=http_status.HTTP_204_NO_CONTENT)


@router.get("/{appointment_id}/intake", response_model=IntakeFormResponse)
async def get_intake_form(
    appointment_id: uuid.UUID,
    svc: AppointmentService = Depends(get_appointment_service),
):
    intake = await svc.get_intake_form(appointment_id)
    return _intake_to_schema(intake)


@router.post("/{appointment_id}/mark-paid", status_code=http_status.HTTP_204_NO_CONTENT)
async def mark_fully_paid(
    appointment_id: uuid.UUID,
    svc: AppointmentService = Depends(get_appointment_service),
):
    await svc.mark_fully_paid(appointment_id)
    return Response(status_code=http_status.HTTP_204_NO_CONTENT)


@router.post("/{appointment_id}/cancel", response_model=CancelResponse)
async def cancel_appointment(
    appointment_id: uuid.UUID,
    notify_client: bool = Query(default=False),
    svc: AppointmentService = Depends(get_appointment_service),
):
    """Cancel status and payment together. Repeating the call changes nothing."""
    report = await svc.cancel_appointment(appointment_id, notify_client=notify_client)
    return CancelResponse(
        cancelled=True,
        side_effect_report=SideEffectReportSchema(**report.to_dict()) if report else None,
    )


@router.post("/{appointment_id}/reminder", response_model=SideEffectReportSchema)
async def send_reminder(
    appointment_id: uuid.UUID,
    svc: AppointmentService = Depends(get_appointment_service),
):
    report = await svc.send_reminder(appointment_id)
    return SideEffectReportSchema(**report.to_dict())

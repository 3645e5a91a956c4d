"""Allowed status and payment transitions.

The tables below are the whole state machine. Every lifecycle operation asks
this module before touching the store, so no screen or router re-checks
status strings on its own.

    status:   scheduled -> checked_in -> cancelled
              scheduled -> cancelled
    payment:  pending -> deposit_paid -> fully_paid
              pending -> fully_paid
              {pending, deposit_paid, fully_paid} -> cancelled   (cancellation only)
"""
from __future__ import annotations

from typing import Dict, FrozenSet, Optional, Tuple

from inkform.core.exceptions import InvalidStateError
from inkform.lifecycle.types import AppointmentStatus, PaymentStatus

_STATUS_TRANSITIONS: Dict[AppointmentStatus, FrozenSet[AppointmentStatus]] = {
    AppointmentStatus.SCHEDULED: frozenset({AppointmentStatus.CHECKED_IN, AppointmentStatus.CANCELLED}),
    AppointmentStatus.CHECKED_IN: frozenset({AppointmentStatus.CANCELLED}),
    AppointmentStatus.CANCELLED: frozenset(),
}

_PAYMENT_TRANSITIONS: Dict[PaymentStatus, FrozenSet[PaymentStatus]] = {
    PaymentStatus.PENDING: frozenset(
        {PaymentStatus.DEPOSIT_PAID, PaymentStatus.FULLY_PAID, PaymentStatus.CANCELLED}
    ),
    PaymentStatus.DEPOSIT_PAID: frozenset({PaymentStatus.FULLY_PAID, PaymentStatus.CANCELLED}),
    PaymentStatus.FULLY_PAID: frozenset({PaymentStatus.CANCELLED}),
    PaymentStatus.CANCELLED: frozenset(),
}


def can_change_status(current: AppointmentStatus, target: AppointmentStatus) -> bool:
    return target in _STATUS_TRANSITIONS[AppointmentStatus(current)]


def can_change_payment(current: PaymentStatus, target: PaymentStatus) -> bool:
    return target in _PAYMENT_TRANSITIONS[PaymentStatus(current)]


def ensure_status_change(current: AppointmentStatus, target: AppointmentStatus) -> None:
    current = AppointmentStatus(current)
    if not can_change_status(current, target):
        raise InvalidStateError(
            f"Appointment cannot move from {current.value} to {target.value}",
            current=current.value,
            requested=target.value,
        )


def initial_payment_status(deposit_paid: bool) -> PaymentStatus:
    return PaymentStatus.DEPOSIT_PAID if deposit_paid else PaymentStatus.PENDING


def check_in_target(current: AppointmentStatus) -> AppointmentStatus:
    """Only a scheduled appointment can be checked in."""
    ensure_status_change(current, AppointmentStatus.CHECKED_IN)
    return AppointmentStatus.CHECKED_IN


def mark_paid_target(current: PaymentStatus) -> Optional[PaymentStatus]:
    """Return FULLY_PAID, or None when already fully paid (idempotent no-op).

    A cancelled payment is never reopened.
    """
    current = PaymentStatus(current)
    if current is PaymentStatus.FULLY_PAID:
        return None
    if not can_change_payment(current, PaymentStatus.FULLY_PAID):
        raise InvalidStateError(
            "A cancelled appointment cannot be marked as paid",
            current=current.value,
            requested=PaymentStatus.FULLY_PAID.value,
        )
    return PaymentStatus.FULLY_PAID


def cancel_targets(
    current: AppointmentStatus,
) -> Optional[Tuple[AppointmentStatus, PaymentStatus]]:
    """Return the (status, payment) pair after cancelling, or None if already cancelled."""
    current = AppointmentStatus(current)
    if current is AppointmentStatus.CANCELLED:
        return None
    ensure_status_change(current, AppointmentStatus.CANCELLED)
    return AppointmentStatus.CANCELLED, PaymentStatus.CANCELLED

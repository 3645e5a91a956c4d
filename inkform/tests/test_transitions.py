"""Status and payment transition rules."""
from __future__ import annotations

import pytest

from inkform.core.exceptions import InvalidStateError
from inkform.lifecycle.transitions import (
    can_change_payment,
    can_change_status,
    cancel_targets,
    check_in_target,
    ensure_status_change,
    initial_payment_status,
    mark_paid_target,
)
from inkform.lifecycle.types import AppointmentStatus as S, PaymentStatus as P


class TestStatusTransitions:
    def test_scheduled_moves_forward(self):
        assert can_change_status(S.SCHEDULED, S.CHECKED_IN)
        assert can_change_status(S.SCHEDULED, S.CANCELLED)

    def test_checked_in_only_cancels(self):
        assert can_change_status(S.CHECKED_IN, S.CANCELLED)
        assert not can_change_status(S.CHECKED_IN, S.SCHEDULED)

    def test_cancelled_is_terminal(self):
        for target in S:
            assert not can_change_status(S.CANCELLED, target)

    def test_accepts_raw_strings(self):
        assert can_change_status("scheduled", S.CHECKED_IN)

    def test_ensure_raises_with_details(self):
        with pytest.raises(InvalidStateError) as info:
            ensure_status_change(S.CHECKED_IN, S.CHECKED_IN)
        assert info.value.details == {"current": "checked_in", "requested": "checked_in"}
        assert info.value.http_status == 409


class TestPaymentTransitions:
    def test_no_backwards_moves(self):
        assert not can_change_payment(P.FULLY_PAID, P.DEPOSIT_PAID)
        assert not can_change_payment(P.DEPOSIT_PAID, P.PENDING)

    def test_cancelled_only_from_cancellation(self):
        for source in (P.PENDING, P.DEPOSIT_PAID, P.FULLY_PAID):
            assert can_change_payment(source, P.CANCELLED)
        assert not can_change_payment(P.CANCELLED, P.FULLY_PAID)

    def test_initial_payment_status(self):
        assert initial_payment_status(True) is P.DEPOSIT_PAID
        assert initial_payment_status(False) is P.PENDING


class TestOperationTargets:
    def test_check_in_only_from_scheduled(self):
        assert check_in_target(S.SCHEDULED) is S.CHECKED_IN
        for current in (S.CHECKED_IN, S.CANCELLED):
            with pytest.raises(InvalidStateError):
                check_in_target(current)

    def test_mark_paid_is_idempotent(self):
        assert mark_paid_target(P.PENDING) is P.FULLY_PAID
        assert mark_paid_target(P.DEPOSIT_PAID) is P.FULLY_PAID
        assert mark_paid_target(P.FULLY_PAID) is None

    def test_mark_paid_refuses_cancelled(self):
        with pytest.raises(InvalidStateError):
            mark_paid_target(P.CANCELLED)

    def test_cancel_targets(self):
        assert cancel_targets(S.SCHEDULED) == (S.CANCELLED, P.CANCELLED)
        assert cancel_targets(S.CHECKED_IN) == (S.CANCELLED, P.CANCELLED)
        assert cancel_targets(S.CANCELLED) is None

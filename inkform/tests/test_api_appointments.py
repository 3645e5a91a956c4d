"""Tests for the appointments router: request mapping, status codes and error bodies."""
from __future__ import annotations

import datetime as _dt
import unittest
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient

from inkform.api.dependencies import get_appointment_service, get_studio_id
from inkform.core.exceptions import (
    InvalidStateError,
    MissingAnswerError,
    NotFoundError,
    ProjectError,
)
from inkform.lifecycle.types import (
    DETAIL_FIELDS,
    INTAKE_QUESTIONS,
    AppointmentStatus,
    BookingResult,
    NotifyOptions,
    PaymentStatus,
    SideEffectReport,
    StepOutcome,
)


# ─── helpers ─────────────────────────────────────────────────────────────────

def _fake_appointment(**kwargs):
    defaults = {
        "id": uuid4(),
        "client_name": "Jane Doe",
        "client_email": "jane@example.com",
        "appointment_date": _dt.datetime(2026, 5, 1, 12, 0, tzinfo=_dt.timezone.utc),
        "description": "Peony",
        "price": Decimal("120.00"),
        "deposit": Decimal("30.00"),
        "deposit_paid": True,
        "status": AppointmentStatus.SCHEDULED,
        "payment_status": PaymentStatus.DEPOSIT_PAID,
        "calendar_event_id": None,
        "created_at": None,
        "updated_at": None,
    }
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


def _make_test_app(svc):
    """Minimal app: appointments router, ProjectError handler, mocked service."""
    from inkform.api.main import project_error_handler
    from inkform.api.routers import appointments

    app = FastAPI()
    app.include_router(appointments.router, prefix="/api/v1")
    app.add_exception_handler(ProjectError, project_error_handler)
    app.dependency_overrides[get_appointment_service] = lambda: svc
    return app


STUDIO_HEADERS = {"X-Studio-Id": str(uuid4())}


class TestBook(unittest.TestCase):
    def test_book_returns_201_and_report(self):
        svc = MagicMock()
        appt_id = uuid4()
        report = SideEffectReport(calendar=StepOutcome.failure("RuntimeError: down"))
        svc.book_appointment = AsyncMock(return_value=BookingResult(appt_id, report))
        client = TestClient(_make_test_app(svc))

        resp = client.post(
            "/api/v1/appointments",
            json={
                "client_name": "Jane Doe",
                "appointment_date": "2026-05-01T14:00:00+02:00",
                "price": "120",
                "deposit": "30",
                "deposit_paid": True,
                "add_to_calendar": True,
            },
            headers=STUDIO_HEADERS,
        )

        self.assertEqual(resp.status_code, 201)
        body = resp.json()
        self.assertEqual(body["appointment_id"], str(appt_id))
        self.assertFalse(body["side_effect_report"]["calendar"]["ok"])
        self.assertEqual(body["side_effect_report"]["email"]["skipped_reason"], "not requested")
        draft, options = svc.book_appointment.await_args.args
        self.assertEqual(draft.price, Decimal("120"))
        self.assertTrue(draft.deposit_paid)
        self.assertEqual(options, NotifyOptions(add_to_calendar=True, send_email=False))

    def test_negative_price_rejected_by_schema(self):
        svc = MagicMock()
        svc.book_appointment = AsyncMock()
        client = TestClient(_make_test_app(svc))

        resp = client.post(
            "/api/v1/appointments",
            json={"client_name": "Jane", "appointment_date": "2026-05-01T14:00:00Z", "price": -5},
        )

        self.assertEqual(resp.status_code, 422)
        svc.book_appointment.assert_not_called()


class TestCheckIn(unittest.TestCase):
    def test_check_in_204(self):
        svc = MagicMock()
        svc.check_in = AsyncMock()
        client = TestClient(_make_test_app(svc))
        appt_id = uuid4()

        resp = client.post(
            f"/api/v1/appointments/{appt_id}/check-in",
            json={
                "answers": {q: "no" for q in INTAKE_QUESTIONS},
                "client_signature": "data:image/png;base64,AAA",
                "practitioner_signature": "data:image/png;base64,BBB",
                "place": "Lyon",
            },
        )

        self.assertEqual(resp.status_code, 204)
        args, kwargs = svc.check_in.await_args
        self.assertEqual(args[0], appt_id)
        self.assertEqual(kwargs["place"], "Lyon")

    def test_validation_error_body(self):
        svc = MagicMock()
        svc.check_in = AsyncMock(side_effect=MissingAnswerError("has_asthma"))
        client = TestClient(_make_test_app(svc))

        resp = client.post(f"/api/v1/appointments/{uuid4()}/check-in", json={"answers": {}})

        self.assertEqual(resp.status_code, 400)
        error = resp.json()["error"]
        self.assertEqual(error["code"], "MISSING_ANSWER")
        self.assertEqual(error["details"], {"question": "has_asthma"})

    def test_invalid_state_is_409(self):
        svc = MagicMock()
        svc.check_in = AsyncMock(
            side_effect=InvalidStateError("nope", current="cancelled", requested="checked_in")
        )
        client = TestClient(_make_test_app(svc))

        resp = client.post(f"/api/v1/appointments/{uuid4()}/check-in", json={})

        self.assertEqual(resp.status_code, 409)
        self.assertEqual(resp.json()["error"]["details"]["current"], "cancelled")


class TestReadsAndTransitions(unittest.TestCase):
    def test_get_appointment(self):
        appt = _fake_appointment()
        svc = MagicMock()
        svc.get_appointment = AsyncMock(return_value=appt)
        client = TestClient(_make_test_app(svc))

        resp = client.get(f"/api/v1/appointments/{appt.id}")

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["payment_status"], "deposit_paid")

    def test_not_found_is_404(self):
        svc = MagicMock()
        svc.get_appointment = AsyncMock(side_effect=NotFoundError("Appointment not found"))
        client = TestClient(_make_test_app(svc))

        resp = client.get(f"/api/v1/appointments/{uuid4()}")

        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["error"]["code"], "NOT_FOUND")

    def test_list_filters(self):
        svc = MagicMock()
        svc.list_appointments = AsyncMock(return_value=[_fake_appointment()])
        client = TestClient(_make_test_app(svc))

        resp = client.get("/api/v1/appointments?status=scheduled&limit=5")

        self.assertEqual(resp.status_code, 200)
        self.assertEqual(len(resp.json()), 1)
        kwargs = svc.list_appointments.await_args.kwargs
        self.assertEqual(kwargs["status"], AppointmentStatus.SCHEDULED)
        self.assertEqual(kwargs["limit"], 5)

    def test_list_rejects_unknown_status(self):
        svc = MagicMock()
        svc.list_appointments = AsyncMock(return_value=[])
        client = TestClient(_make_test_app(svc))
        resp = client.get("/api/v1/appointments?status=done")
        self.assertEqual(resp.status_code, 422)

    def test_intake_form(self):
        appt_id = uuid4()
        intake = SimpleNamespace(
            appointment_id=appt_id,
            place="Lyon",
            signature_date=_dt.datetime(2026, 5, 1, 12, 0, tzinfo=_dt.timezone.utc),
            client_signature="data:image/png;base64,AAA",
            practitioner_signature="data:image/png;base64,BBB",
            **{q: False for q in INTAKE_QUESTIONS},
            **{col: None for col in DETAIL_FIELDS.values()},
        )
        svc = MagicMock()
        svc.get_intake_form = AsyncMock(return_value=intake)
        client = TestClient(_make_test_app(svc))

        resp = client.get(f"/api/v1/appointments/{appt_id}/intake")

        self.assertEqual(resp.status_code, 200)
        body = resp.json()
        self.assertEqual(len(body["answers"]), 20)
        self.assertIsNone(body["details"]["allergies_details"])

    def test_mark_paid_204(self):
        svc = MagicMock()
        svc.mark_fully_paid = AsyncMock()
        client = TestClient(_make_test_app(svc))
        appt_id = uuid4()

        resp = client.post(f"/api/v1/appointments/{appt_id}/mark-paid")

        self.assertEqual(resp.status_code, 204)
        svc.mark_fully_paid.assert_awaited_once_with(appt_id)

    def test_cancel_with_notify(self):
        svc = MagicMock()
        svc.cancel_appointment = AsyncMock(
            return_value=SideEffectReport(email=StepOutcome.succeeded("<m>"))
        )
        client = TestClient(_make_test_app(svc))
        appt_id = uuid4()

        resp = client.post(f"/api/v1/appointments/{appt_id}/cancel?notify_client=true")

        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()["side_effect_report"]["email"]["ok"])
        svc.cancel_appointment.assert_awaited_once_with(appt_id, notify_client=True)

    def test_cancel_repeat_has_no_report(self):
        svc = MagicMock()
        svc.cancel_appointment = AsyncMock(return_value=None)
        client = TestClient(_make_test_app(svc))

        resp = client.post(f"/api/v1/appointments/{uuid4()}/cancel")

        self.assertEqual(resp.json(), {"cancelled": True, "side_effect_report": None})

    def test_reminder(self):
        svc = MagicMock()
        svc.send_reminder = AsyncMock(return_value=SideEffectReport())
        client = TestClient(_make_test_app(svc))

        resp = client.post(f"/api/v1/appointments/{uuid4()}/reminder")

        self.assertEqual(resp.status_code, 200)
        self.assertFalse(resp.json()["email"]["attempted"])


class TestStudioHeader(unittest.TestCase):
    def _app(self):
        app = FastAPI()

        @app.get("/whoami")
        async def whoami(studio_id=Depends(get_studio_id)):
            return {"studio_id": str(studio_id)}

        from inkform.api.main import project_error_handler
        app.add_exception_handler(ProjectError, project_error_handler)
        return app

    def test_valid_header(self):
        studio_id = uuid4()
        resp = TestClient(self._app()).get("/whoami", headers={"X-Studio-Id": str(studio_id)})
        self.assertEqual(resp.json(), {"studio_id": str(studio_id)})

    def test_malformed_header_is_400(self):
        resp = TestClient(self._app()).get("/whoami", headers={"X-Studio-Id": "studio-1"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["error"]["code"], "VALIDATION_ERROR")

    def test_missing_header_is_422(self):
        resp = TestClient(self._app()).get("/whoami")
        self.assertEqual(resp.status_code, 422)


class TestHealth(unittest.TestCase):
    def test_health(self):
        from inkform.api.main import app

        resp = TestClient(app).get("/health")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"status": "ok"})


if __name__ == "__main__":
    unittest.main()

"""Tests for NotificationService: skip rules, failure capture and the event body."""
from __future__ import annotations

import asyncio
import datetime as _dt
import unittest
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from inkform.config.notifications import NotificationConfig
from inkform.core.exceptions import ConfigurationError
from inkform.integrations.smtp_mailer import SMTPMailTransport
from inkform.lifecycle.types import EmailTemplate, NotifyOptions
from inkform.services.notification_service import (
    NotificationService,
    build_appointment_event,
    default_mail_factory,
)


def _run(coro):
    return asyncio.run(coro)


def _fake_studio(**kwargs):
    defaults = {
        "id": uuid4(),
        "name": "Black Lotus Tattoo",
        "address": "12 rue Mercière, Lyon",
        "phone": "+33 4 00 00 00 00",
        "calendar_integration_enabled": True,
        "google_calendar_credentials": '{"type": "service_account"}',
        "email_notifications_enabled": True,
        "email_smtp_host": "smtp.example.com",
        "email_smtp_port": 587,
        "email_smtp_user": "studio",
        "email_smtp_pass": "secret",
        "email_from": "hello@blacklotus.example",
    }
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


def _fake_appointment(**kwargs):
    defaults = {
        "id": uuid4(),
        "client_name": "Jane Doe",
        "client_email": "jane@example.com",
        "appointment_date": _dt.datetime(2026, 5, 1, 12, 0, tzinfo=_dt.timezone.utc),
        "description": "Fine-line peony, left forearm",
        "price": Decimal("120.00"),
        "deposit": Decimal("30.00"),
    }
    defaults.update(kwargs)
    return SimpleNamespace(**defaults)


def _service(*, calendar=None, transport=None):
    store = MagicMock()
    store.record_calendar_event = AsyncMock(return_value=True)
    calendar = calendar or MagicMock()
    transport = transport or MagicMock()
    svc = NotificationService(
        store,
        NotificationConfig(),
        calendar_factory=MagicMock(return_value=calendar),
        mail_factory=MagicMock(return_value=transport),
    )
    return svc, store


BOTH = NotifyOptions(add_to_calendar=True, send_email=True)


class TestBothSucceed(unittest.TestCase):
    def test_report_carries_references(self):
        calendar = MagicMock()
        calendar.create_event = AsyncMock(return_value={"id": "evt_1"})
        transport = MagicMock()
        transport.send = AsyncMock(return_value="<msg-1@example.com>")
        svc, store = _service(calendar=calendar, transport=transport)
        appt = _fake_appointment()

        report = _run(svc.notify(_fake_studio(), appt, BOTH))

        self.assertTrue(report.calendar.ok)
        self.assertEqual(report.calendar.reference, "evt_1")
        self.assertTrue(report.email.ok)
        self.assertEqual(report.email.reference, "<msg-1@example.com>")
        self.assertFalse(report.has_failures)
        store.record_calendar_event.assert_awaited_once_with(appt.id, "evt_1")

    def test_email_uses_requested_template(self):
        transport = MagicMock()
        transport.send = AsyncMock(return_value="<m>")
        svc, _ = _service(transport=transport)

        _run(svc.notify(
            _fake_studio(), _fake_appointment(), NotifyOptions(send_email=True),
            EmailTemplate.CANCELLATION,
        ))

        to, subject, html = transport.send.await_args.args
        self.assertEqual(to, "jane@example.com")
        self.assertEqual(subject, "Appointment cancelled - Black Lotus Tattoo")
        self.assertIn("has been cancelled", html)


class TestFailuresAreCaptured(unittest.TestCase):
    def test_calendar_error_does_not_block_email(self):
        calendar = MagicMock()
        calendar.create_event = AsyncMock(side_effect=RuntimeError("quota exceeded"))
        transport = MagicMock()
        transport.send = AsyncMock(return_value="<m>")
        svc, store = _service(calendar=calendar, transport=transport)

        report = _run(svc.notify(_fake_studio(), _fake_appointment(), BOTH))

        self.assertTrue(report.calendar.attempted)
        self.assertFalse(report.calendar.ok)
        self.assertEqual(report.calendar.error, "RuntimeError: quota exceeded")
        self.assertTrue(report.email.ok)
        self.assertTrue(report.has_failures)
        store.record_calendar_event.assert_not_called()

    def test_event_without_id_is_failure(self):
        calendar = MagicMock()
        calendar.create_event = AsyncMock(return_value={})
        svc, store = _service(calendar=calendar)

        report = _run(svc.notify(_fake_studio(), _fake_appointment(), NotifyOptions(add_to_calendar=True)))

        self.assertTrue(report.calendar.failed)
        store.record_calendar_event.assert_not_called()

    def test_smtp_error_is_failure(self):
        transport = MagicMock()
        transport.send = AsyncMock(side_effect=OSError("connection refused"))
        svc, _ = _service(transport=transport)

        report = _run(svc.notify(_fake_studio(), _fake_appointment(), NotifyOptions(send_email=True)))

        self.assertTrue(report.email.failed)
        self.assertIn("connection refused", report.email.error)
        self.assertFalse(report.calendar.attempted)

    def test_missing_smtp_host_is_failure(self):
        svc = NotificationService(MagicMock(), NotificationConfig())
        studio = _fake_studio(email_smtp_host=None)

        report = _run(svc.notify(studio, _fake_appointment(), NotifyOptions(send_email=True)))

        self.assertTrue(report.email.failed)
        self.assertTrue(report.email.error.startswith("ConfigurationError"))


class TestSkipRules(unittest.TestCase):
    def test_not_requested(self):
        svc, _ = _service()
        report = _run(svc.notify(_fake_studio(), _fake_appointment(), NotifyOptions()))
        self.assertEqual(report.calendar.skipped_reason, "not requested")
        self.assertEqual(report.email.skipped_reason, "not requested")
        self.assertFalse(report.has_failures)

    def test_studio_toggles_off(self):
        svc, _ = _service()
        studio = _fake_studio(calendar_integration_enabled=False, email_notifications_enabled=False)
        report = _run(svc.notify(studio, _fake_appointment(), BOTH))
        self.assertEqual(report.calendar.skipped_reason, "calendar integration disabled")
        self.assertEqual(report.email.skipped_reason, "email notifications disabled")

    def test_no_credentials_or_address(self):
        svc, _ = _service()
        studio = _fake_studio(google_calendar_credentials=None)
        report = _run(svc.notify(studio, _fake_appointment(client_email=None), BOTH))
        self.assertEqual(report.calendar.skipped_reason, "no calendar credentials")
        self.assertEqual(report.email.skipped_reason, "no client email")
        self.assertFalse(report.calendar.attempted)
        self.assertFalse(report.email.attempted)


class TestEventBody:
    def test_two_hour_event_with_reminders(self):
        appt = _fake_appointment()
        event = build_appointment_event(appt, "Europe/Paris")

        assert event["summary"] == "Tattoo Appointment - Jane Doe"
        assert event["start"] == {"dateTime": "2026-05-01T12:00:00+00:00", "timeZone": "Europe/Paris"}
        assert event["end"]["dateTime"] == "2026-05-01T14:00:00+00:00"
        assert event["reminders"] == {
            "useDefault": False,
            "overrides": [
                {"method": "email", "minutes": 1440},
                {"method": "popup", "minutes": 60},
            ],
        }
        assert "Total Price: €120.00" in event["description"]
        assert "Deposit: €30.00" in event["description"]

    def test_no_amount_lines_without_price(self):
        event = build_appointment_event(_fake_appointment(price=None, deposit=None), "UTC")
        assert "Price" not in event["description"]
        assert "Deposit" not in event["description"]


class TestDefaultMailFactory:
    def test_builds_smtp_transport(self):
        transport = default_mail_factory(_fake_studio(email_smtp_port=None), NotificationConfig())
        assert isinstance(transport, SMTPMailTransport)
        assert transport.port == 587
        assert transport.from_address == "Black Lotus Tattoo <hello@blacklotus.example>"

    def test_falls_back_to_default_sender(self):
        transport = default_mail_factory(_fake_studio(email_from=None), NotificationConfig())
        assert transport.from_address == "Black Lotus Tattoo <noreply@inkform.app>"

    def test_requires_host(self):
        with pytest.raises(ConfigurationError):
            default_mail_factory(_fake_studio(email_smtp_host=""), NotificationConfig())

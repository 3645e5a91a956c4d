"""Client e-mail templates: confirmation, reminder, cancellation.

Each renderer returns ``(subject, html)``. Anything typed by a user (client
name, description, studio details) is HTML-escaped.
"""
from __future__ import annotations

import datetime as _dt
from decimal import Decimal
from html import escape
from typing import Callable, Dict, Optional, Tuple
from zoneinfo import ZoneInfo

from inkform.lifecycle.types import EmailTemplate

THEME = {
    "ink": "#1f1f1f",
    "accent": "#b3261e",
    "muted": "#6b6b6b",
    "background": "#f6f4f1",
}


def format_eur(amount: Optional[Decimal]) -> Optional[str]:
    if amount is None:
        return None
    return f"€{Decimal(amount):.2f}"


def _format_when(when: _dt.datetime, zone: ZoneInfo) -> str:
    return when.astimezone(zone).strftime("%A %d %B %Y at %H:%M")


def _layout(title: str, body: str, studio) -> str:
    footer_lines = [escape(studio.name)]
    if studio.address:
        footer_lines.append(escape(studio.address))
    if studio.phone:
        footer_lines.append(escape(studio.phone))
    footer = "<br>".join(footer_lines)
    return f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>{escape(title)}</title></head>
<body style="margin:0;padding:24px;background:{THEME['background']};font-family:Arial,sans-serif;color:{THEME['ink']};">
  <div style="max-width:560px;margin:0 auto;background:#ffffff;padding:32px;border-top:4px solid {THEME['accent']};">
    <h1 style="font-size:20px;margin:0 0 16px;">{escape(title)}</h1>
    {body}
    <p style="margin-top:32px;font-size:13px;color:{THEME['muted']};">{footer}</p>
  </div>
</body>
</html>"""


def _amount_rows(appointment) -> str:
    rows = []
    price = format_eur(appointment.price)
    deposit = format_eur(appointment.deposit)
    if price:
        rows.append(f"<li>Total price: {price}</li>")
    if deposit:
        rows.append(f"<li>Deposit: {deposit}</li>")
    return "".join(rows)


def confirmation_template(appointment, studio, zone: ZoneInfo) -> Tuple[str, str]:
    when = _format_when(appointment.appointment_date, zone)
    body = f"""
    <p>Hello {escape(appointment.client_name)},</p>
    <p>Your tattoo appointment at <strong>{escape(studio.name)}</strong> is confirmed for
    <strong>{when}</strong>.</p>
    <ul>
      <li>Project: {escape(appointment.description or "")}</li>
      {_amount_rows(appointment)}
    </ul>
    <p>Please arrive rested, hydrated and having eaten. You will fill in a short health
    and consent form when you check in.</p>"""
    return f"Appointment confirmed - {studio.name}", _layout("Your appointment is confirmed", body, studio)


def reminder_template(appointment, studio, zone: ZoneInfo) -> Tuple[str, str]:
    when = _format_when(appointment.appointment_date, zone)
    body = f"""
    <p>Hello {escape(appointment.client_name)},</p>
    <p>This is a reminder of your tattoo appointment at <strong>{escape(studio.name)}</strong>
    on <strong>{when}</strong>.</p>
    <p>Avoid alcohol and aspirin in the 24 hours before your session.</p>"""
    return f"Reminder: your appointment at {studio.name}", _layout("See you soon", body, studio)


def cancellation_template(appointment, studio, zone: ZoneInfo) -> Tuple[str, str]:
    when = _format_when(appointment.appointment_date, zone)
    body = f"""
    <p>Hello {escape(appointment.client_name)},</p>
    <p>Your appointment at <strong>{escape(studio.name)}</strong> planned for
    <strong>{when}</strong> has been cancelled.</p>
    <p>Contact the studio to book a new date.</p>"""
    return f"Appointment cancelled - {studio.name}", _layout("Your appointment was cancelled", body, studio)


_RENDERERS: Dict[EmailTemplate, Callable[..., Tuple[str, str]]] = {
    EmailTemplate.CONFIRMATION: confirmation_template,
    EmailTemplate.REMINDER: reminder_template,
    EmailTemplate.CANCELLATION: cancellation_template,
}


def render(template: EmailTemplate, appointment, studio, zone: ZoneInfo) -> Tuple[str, str]:
    return _RENDERERS[EmailTemplate(template)](appointment, studio, zone)

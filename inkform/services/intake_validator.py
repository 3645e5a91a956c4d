"""Server-side validation of the anamnesis (health and consent) form.

The check-in screen already requires every radio button, but the submitted
payload is re-checked here because this is where untrusted input becomes a
stored medical record.
"""
from __future__ import annotations

import datetime as _dt
from typing import Any, Callable, Dict, Mapping, Optional

from inkform.core.exceptions import (
    MissingAnswerError,
    MissingPlaceError,
    MissingSignatureError,
)
from inkform.lifecycle.types import DETAIL_FIELDS, INTAKE_QUESTIONS, IntakeFormData

_YES = "yes"
_NO = "no"


def _utcnow() -> _dt.datetime:
    return _dt.datetime.now(_dt.timezone.utc)


def _parse_answer(question: str, raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, str):
        value = raw.strip().lower()
        if value == _YES:
            return True
        if value == _NO:
            return False
    raise MissingAnswerError(question)


def _signature_is_empty(signature: Optional[str]) -> bool:
    if signature is None or not signature.strip():
        return True
    # An untouched canvas can still serialize as "data:image/png;base64,"
    if signature.startswith("data:"):
        _, _, payload = signature.partition(",")
        return not payload.strip()
    return False


class IntakeValidator:
    """Turn raw form input into an IntakeFormData or raise a ValidationError.

    ``clock`` is injectable so tests can pin the signature timestamp.
    """

    def __init__(self, clock: Callable[[], _dt.datetime] = _utcnow) -> None:
        self._clock = clock

    def validate(
        self,
        raw_answers: Mapping[str, Any],
        client_signature: Optional[str],
        practitioner_signature: Optional[str],
        place: Optional[str],
    ) -> IntakeFormData:
        answers: Dict[str, bool] = {}
        for question in INTAKE_QUESTIONS:
            answers[question] = _parse_answer(question, raw_answers.get(question))

        details: Dict[str, Optional[str]] = {}
        for question, detail_key in DETAIL_FIELDS.items():
            if answers[question]:
                raw_detail = raw_answers.get(detail_key)
                details[detail_key] = "" if raw_detail is None else str(raw_detail)
            else:
                details[detail_key] = None

        if _signature_is_empty(client_signature):
            raise MissingSignatureError("client")
        if _signature_is_empty(practitioner_signature):
            raise MissingSignatureError("practitioner")

        if place is None or not place.strip():
            raise MissingPlaceError("The place of signature is required")

        return IntakeFormData(
            answers=answers,
            details=details,
            place=place.strip(),
            client_signature=client_signature,  # type: ignore[arg-type]
            practitioner_signature=practitioner_signature,  # type: ignore[arg-type]
            signature_date=self._clock(),
        )


def validate_intake(
    raw_answers: Mapping[str, Any],
    client_signature: Optional[str],
    practitioner_signature: Optional[str],
    place: Optional[str],
) -> IntakeFormData:
    """Module-level shortcut using the real clock."""
    return IntakeValidator().validate(raw_answers, client_signature, practitioner_signature, place)

"""
Error taxonomy of the appointment lifecycle.

Validation errors are surfaced to the caller and never retried. NotFound and
InvalidState mean the caller's view is stale. PersistenceError means the
operation did not take effect. Side-effect failures are not exceptions here:
they are reported in a SideEffectReport.
"""
from __future__ import annotations

from typing import Any, Optional

from inkform.core.exceptions.base import ProjectError


class ConfigurationError(ProjectError):
    """Invalid or missing configuration."""

    default_code = "CONFIGURATION_ERROR"
    default_http_status = 500


class ValidationError(ProjectError):
    """Request or input validation failed."""

    default_code = "VALIDATION_ERROR"
    default_http_status = 400


class MissingAnswerError(ValidationError):
    """An intake question has no explicit yes/no answer."""

    default_code = "MISSING_ANSWER"

    def __init__(self, question: str, **kwargs: Any) -> None:
        details = {"question": question, **kwargs.pop("details", {})}
        super().__init__(f"Question '{question}' must be answered yes or no", details=details, **kwargs)
        self.question = question


class MissingSignatureError(ValidationError):
    """The client or practitioner signature canvas is empty."""

    default_code = "MISSING_SIGNATURE"

    def __init__(self, party: str, **kwargs: Any) -> None:
        details = {"party": party, **kwargs.pop("details", {})}
        super().__init__(f"The {party} signature is required", details=details, **kwargs)
        self.party = party


class MissingPlaceError(ValidationError):
    """The place of signature is blank."""

    default_code = "MISSING_PLACE"


class InvalidAmountError(ValidationError):
    """A price or deposit is negative or not a number."""

    default_code = "INVALID_AMOUNT"


class MissingClientNameError(ValidationError):
    default_code = "MISSING_CLIENT_NAME"


class InvalidDateError(ValidationError):
    """The appointment date is missing or has no timezone."""

    default_code = "INVALID_DATE"


class NotFoundError(ProjectError):
    """Requested resource not found."""

    default_code = "NOT_FOUND"
    default_http_status = 404


class ConflictError(ProjectError):
    """Resource state conflict (e.g. duplicate, version mismatch)."""

    default_code = "CONFLICT"
    default_http_status = 409


class InvalidStateError(ConflictError):
    """The requested transition is not allowed from the current state."""

    default_code = "INVALID_STATE"

    def __init__(
        self,
        message: str,
        *,
        current: Optional[str] = None,
        requested: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        details = dict(kwargs.pop("details", {}) or {})
        if current is not None:
            details["current"] = current
        if requested is not None:
            details["requested"] = requested
        super().__init__(message, details=details, **kwargs)
        self.current = current
        self.requested = requested


class DuplicateIntakeError(ConflictError):
    """An intake form already exists for the appointment."""

    default_code = "DUPLICATE_INTAKE"


class PersistenceError(ProjectError):
    """The database write failed; nothing took effect."""

    default_code = "PERSISTENCE_ERROR"
    default_http_status = 503


class UnauthorizedError(ProjectError):
    """Authentication required or failed."""

    default_code = "UNAUTHORIZED"
    default_http_status = 401

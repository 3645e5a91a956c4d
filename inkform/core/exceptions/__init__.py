"""
Inkform exception system.

Usage:
    from inkform.core.exceptions import InvalidStateError, MissingSignatureError

    raise MissingSignatureError("client")
    raise InvalidStateError("Appointment is not scheduled", current="cancelled", requested="checked_in")
"""
from inkform.core.exceptions.base import ProjectError
from inkform.core.exceptions.errors import (
    ConfigurationError,
    ConflictError,
    DuplicateIntakeError,
    InvalidAmountError,
    InvalidDateError,
    InvalidStateError,
    MissingAnswerError,
    MissingClientNameError,
    MissingPlaceError,
    MissingSignatureError,
    NotFoundError,
    PersistenceError,
    UnauthorizedError,
    ValidationError,
)

__all__ = [
    "ProjectError",
    "ConfigurationError",
    "ValidationError",
    "MissingAnswerError",
    "MissingSignatureError",
    "MissingPlaceError",
    "InvalidAmountError",
    "MissingClientNameError",
    "InvalidDateError",
    "NotFoundError",
    "ConflictError",
    "InvalidStateError",
    "DuplicateIntakeError",
    "PersistenceError",
    "UnauthorizedError",
]

"""
Base exception type for inkform.

Every error the lifecycle raises derives from ProjectError so that the API
layer can turn it into a response with one handler. New types are added
by subclassing.
"""
from __future__ import annotations

import traceback
from typing import Any, Optional


class ProjectError(Exception):
    """
    Base exception for all inkform errors.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable slug (defaults to the class default_code).
        http_status: Suggested HTTP status for API responses (default 500).
        details: Optional dict for extra context (e.g. which question is unanswered).
        cause: Optional chained exception (e.g. the SQLAlchemy error behind a PersistenceError).
    """

    default_code: str = "ERROR"
    default_http_status: int = 500

    def __init__(
        self,
        message: str,
        *,
        code: Optional[str] = None,
        http_status: Optional[int] = None,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code if code is not None else getattr(
            self.__class__, "default_code", self.__class__.__name__
        )
        self.http_status = (
            http_status
            if http_status is not None
            else getattr(self.__class__, "default_http_status", 500)
        )
        self.details: dict[str, Any] = details or {}
        self.cause = cause

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, code={self.code!r}, "
            f"http_status={self.http_status})"
        )

    def __str__(self) -> str:
        return self.message

    def to_dict(self, *, include_traceback: bool = True) -> dict[str, Any]:
        """Serialize for logging (with cause traceback) or API responses (without)."""
        out: dict[str, Any] = {
            "message": self.message,
            "code": self.code,
            "http_status": self.http_status,
        }
        if self.details:
            out["details"] = self.details
        if self.cause is not None:
            out["cause"] = str(self.cause)
            if include_traceback:
                out["cause_traceback"] = traceback.format_exception(
                    type(self.cause), self.cause, self.cause.__traceback__
                )
        return out

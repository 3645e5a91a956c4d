"""Provider interfaces consumed by the notification service."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict


class CalendarProvider(ABC):
    @abstractmethod
    async def create_event(self, event: Dict[str, Any]) -> Dict[str, Any]:
        """Insert an event and return the provider's representation (must contain ``id``)."""


class MailTransport(ABC):
    @abstractmethod
    async def send(self, to: str, subject: str, html: str) -> str:
        """Deliver one HTML message and return its Message-ID."""

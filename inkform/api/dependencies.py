"""FastAPI dependency providers."""
from __future__ import annotations

import uuid
from collections.abc import AsyncGenerator

from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession

from inkform.core.exceptions import ValidationError
from inkform.services.appointment_service import AppointmentService


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Yield an AsyncSession from the app-level session factory (rollback on error)."""
    session_factory = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_studio_id(x_studio_id: str = Header(...)) -> uuid.UUID:
    """Studio scope of the request. Resolving it from the caller's identity is the auth layer's job."""
    try:
        return uuid.UUID(x_studio_id)
    except ValueError as exc:
        raise ValidationError("X-Studio-Id must be a UUID", cause=exc) from exc


async def get_appointment_service(
    request: Request,
    session: AsyncSession = Depends(get_session),
    studio_id: uuid.UUID = Depends(get_studio_id),
) -> AppointmentService:
    state = request.app.state
    kwargs = {}
    for name in ("calendar_factory", "mail_factory"):
        factory = getattr(state, name, None)
        if factory is not None:
            kwargs[name] = factory
    return AppointmentService(
        session,
        studio_id,
        notification_config=getattr(state, "notification_config", None),
        **kwargs,
    )

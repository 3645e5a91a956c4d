"""Generic async repository for SQLAlchemy 2.0."""
from __future__ import annotations

from typing import Any, ClassVar, Generic, Optional, TypeVar
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from inkform.core.exceptions import PersistenceError

ModelT = TypeVar("ModelT")


class BaseRepository(Generic[ModelT]):
    model: ClassVar[type]

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _execute(self, stmt, failure_message: str):
        """Run a statement; any storage error surfaces as PersistenceError."""
        try:
            return await self.session.execute(stmt)
        except SQLAlchemyError as exc:
            raise PersistenceError(failure_message, cause=exc) from exc

    async def get_by_id(self, id: UUID) -> Optional[ModelT]:
        try:
            return await self.session.get(self.model, id)  # type: ignore[return-value]
        except SQLAlchemyError as exc:
            raise PersistenceError(
                f"Could not load {self.model.__name__}", cause=exc
            ) from exc

    async def create(self, data: dict[str, Any]) -> ModelT:
        """Insert one row. Storage failures surface as PersistenceError."""
        instance = self.model(**data)
        self.session.add(instance)
        try:
            await self.session.flush()
            await self.session.refresh(instance)
        except SQLAlchemyError as exc:
            raise PersistenceError(
                f"Could not insert {self.model.__name__}", cause=exc
            ) from exc
        return instance  # type: ignore[return-value]

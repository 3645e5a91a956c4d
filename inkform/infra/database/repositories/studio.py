"""Studio repository (read-only for the lifecycle)."""
from __future__ import annotations

from uuid import UUID

from inkform.core.exceptions import NotFoundError
from inkform.infra.database.models.studio import Studio
from inkform.infra.database.repositories.base import BaseRepository


class StudioRepository(BaseRepository[Studio]):
    model = Studio

    async def get_required(self, id: UUID) -> Studio:
        studio = await self.get_by_id(id)
        if studio is None:
            raise NotFoundError("Studio not found", details={"studio_id": str(id)})
        return studio

"""
Activity log repository.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from rentals.repositories.base import BaseRepository
from rentals.models.activity import Activity
from typing import List


class ActivityRepository(BaseRepository[Activity]):
    def __init__(self, db: AsyncSession):
        super().__init__(Activity, db)

    async def recent(self, limit: int = 10) -> List[Activity]:
        return await self.get_multi(limit=limit)

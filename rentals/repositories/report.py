"""
Report repository with moderation filters.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from rentals.repositories.base import BaseRepository
from rentals.models.report import Report, ReportType, ReportStatus
from typing import Optional, List


class ReportRepository(BaseRepository[Report]):
    def __init__(self, db: AsyncSession):
        super().__init__(Report, db)

    async def list_reports(
        self,
        report_type: Optional[ReportType] = None,
        status: Optional[ReportStatus] = None,
        skip: int = 0,
        limit: int = 100
    ) -> List[Report]:
        """Reports newest first, with reporter and listing eagerly joined."""
        return await self.get_multi(
            skip=skip,
            limit=limit,
            filters={"type": report_type, "status": status},
        )

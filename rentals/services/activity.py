"""
Activity logging for the admin dashboard.
"""

from typing import Any, Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from rentals.models.activity import Activity, ActivityType
from rentals.repositories.activity import ActivityRepository
import json
import logging

logger = logging.getLogger(__name__)


class ActivityService:
    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.activity_repo = ActivityRepository(db_session)

    async def log(
        self,
        activity_type: ActivityType,
        description: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> Optional[Activity]:
        """
        Record an activity entry.

        A failed write is logged and swallowed; the caller's operation has
        already been committed and must not be reported as failed.
        """
        try:
            return await self.activity_repo.create({
                "type": activity_type,
                "description": description,
                "metadata_json": json.dumps(metadata, default=str) if metadata else None,
            })
        except SQLAlchemyError as e:
            logger.error(f"Failed to log activity {activity_type.value}: {e}")
            return None

    async def recent(self, limit: int = 10) -> List[Activity]:
        return await self.activity_repo.recent(limit=limit)

"""
Notification repository.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import update, and_
from rentals.repositories.base import BaseRepository
from rentals.models.notification import Notification
from typing import List
import uuid
import logging

logger = logging.getLogger(__name__)


class NotificationRepository(BaseRepository[Notification]):
    def __init__(self, db: AsyncSession):
        super().__init__(Notification, db)

    async def list_for_user(self, user_id: uuid.UUID, limit: int = 100) -> List[Notification]:
        return await self.get_multi(limit=limit, filters={"user_id": user_id})

    async def mark_all_read(self, user_id: uuid.UUID) -> int:
        """
        Mark every unread notification of the user as read.

        Returns:
            Number of notifications updated
        """
        try:
            result = await self.db.execute(
                update(Notification)
                .where(and_(Notification.user_id == user_id, Notification.read.is_(False)))
                .values(read=True)
                .execution_options(synchronize_session="fetch")
            )
            await self.db.commit()
            return result.rowcount
        except Exception as e:
            await self.db.rollback()
            logger.error(f"Failed to mark notifications read for {user_id}: {e}")
            raise

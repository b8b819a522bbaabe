"""
Notification service.
Notifications are created by moderation events; owners only read and mark them.
"""

from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import SQLAlchemyError
from rentals.models.notification import Notification
from rentals.models.user import User
from rentals.repositories.notification import NotificationRepository
from rentals.utils.exceptions import InsufficientPermissionsError, NotFoundError
from rentals.utils.permissions import enforce
import uuid
import logging

logger = logging.getLogger(__name__)


class NotificationService:
    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.notification_repo = NotificationRepository(db_session)

    async def notify(self, user_id: uuid.UUID, title: str, description: str) -> Optional[Notification]:
        """
        Create a notification for a user.
        Delivery is best effort; a storage failure is logged, not raised.
        """
        try:
            notification = await self.notification_repo.create({
                "user_id": user_id,
                "title": title,
                "description": description,
            })
            logger.info(f"Notified user {user_id}: {title}")
            return notification
        except SQLAlchemyError as e:
            logger.error(f"Failed to notify user {user_id}: {e}")
            return None

    async def list_notifications(self, current_user: User) -> List[Notification]:
        enforce(current_user)
        return await self.notification_repo.list_for_user(current_user.id)

    async def set_read(
        self,
        notification_id: uuid.UUID,
        current_user: User,
        read: bool = True
    ) -> Notification:
        """
        Set the read flag on one of the caller's notifications.

        Raises:
            AuthenticationError: If no user is given
            NotFoundError: If the notification does not exist
            AuthorizationError: If it belongs to another user, admins included
        """
        enforce(current_user)

        notification = await self.notification_repo.get_by_id(notification_id)
        if notification is None:
            raise NotFoundError("Notification", str(notification_id))

        if notification.user_id != current_user.id:
            raise InsufficientPermissionsError("update this notification")

        return await self.notification_repo.update(notification, {"read": read})

    async def mark_all_read(self, current_user: User) -> int:
        enforce(current_user)
        updated = await self.notification_repo.mark_all_read(current_user.id)
        logger.info(f"Marked {updated} notifications read for user {current_user.id}")
        return updated

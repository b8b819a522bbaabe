"""
Profile management for the current user.
"""

from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from rentals.models.activity import ActivityType
from rentals.models.user import User
from rentals.repositories.user import UserRepository
from rentals.schemas.user import ProfileUpdate
from rentals.services.activity import ActivityService
from rentals.utils.exceptions import ValidationError, NotFoundError
from rentals.utils.permissions import enforce
import uuid
import logging

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db_session: AsyncSession):
        self.db = db_session
        self.user_repo = UserRepository(db_session)
        self.activity = ActivityService(db_session)

    async def get_profile(self, user_id: uuid.UUID, current_user: Optional[User]) -> User:
        enforce(current_user)

        user = await self.user_repo.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User", str(user_id))
        return user

    async def update_profile(self, update: ProfileUpdate, current_user: Optional[User]) -> User:
        """
        Update name, email, image and optionally the password.

        Raises:
            ValidationError: If the new email is taken, the account has no
                password to change, or the current password is wrong
        """
        enforce(current_user)

        changes = {}
        data = update.model_dump(exclude_unset=True)

        if data.get("name"):
            changes["name"] = data["name"]

        if "image" in data:
            changes["image"] = data["image"] or None

        if data.get("email") and data["email"] != current_user.email:
            try:
                email = User.validate_email_format(data["email"])
            except ValueError as e:
                raise ValidationError(str(e))
            existing = await self.user_repo.get_by_email(email)
            if existing is not None and existing.id != current_user.id:
                raise ValidationError("Email is already taken")
            changes["email"] = email

        if data.get("new_password"):
            if not current_user.has_password:
                raise ValidationError("Password cannot be changed for accounts that sign in with Google")
            if not data.get("current_password"):
                raise ValidationError("Current password is required to set a new password")
            if not current_user.verify_password(data["current_password"]):
                raise ValidationError("Current password is incorrect")
            try:
                changes["hashed_password"] = User.hash_password(data["new_password"])
            except ValueError as e:
                raise ValidationError(str(e))

        if not changes:
            return current_user

        user = await self.user_repo.update(current_user, changes)
        logger.info(f"User {user.id} updated profile fields: {sorted(changes)}")

        await self.activity.log(
            ActivityType.USER_UPDATED,
            f"User {user.email} updated their profile",
            {"user_id": str(user.id), "fields": sorted(k for k in changes if k != "hashed_password")},
        )
        return user

    async def delete_account(self, current_user: Optional[User]) -> None:
        """Delete the caller's account and everything it owns."""
        enforce(current_user)

        user_id, email = current_user.id, current_user.email
        await self.user_repo.delete(current_user)
        logger.info(f"User {user_id} deleted their account")

        await self.activity.log(
            ActivityType.USER_DELETED,
            f"User {email} deleted their account",
            {"user_id": str(user_id)},
        )

"""
User repository for authentication and account management operations.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from rentals.repositories.base import BaseRepository
from rentals.models.user import User, UserRole
from typing import Optional, Dict, Any
import logging

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """
    Repository for user management with credential and OAuth account support.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def create_user(self, user_data: Dict[str, Any]) -> User:
        """
        Create a new user with email validation and optional password hashing.

        Args:
            user_data: Dictionary containing user information
                      Must include: email
                      Optional: password, name, image, role (defaults to USER),
                      email_verified_at

        Returns:
            Created user instance

        Raises:
            ValueError: If validation fails or the email is taken
        """
        try:
            data = dict(user_data)
            email = User.validate_email_format(data.pop("email"))

            existing_user = await self.get_by_email(email)
            if existing_user:
                raise ValueError(f"User with email {email} already exists")

            password = data.pop("password", None)
            create_data = {
                **data,
                "email": email,
                "hashed_password": User.hash_password(password) if password else None,
                "role": data.get("role") or UserRole.USER,
                "is_active": data.get("is_active", True),
            }

            created_user = await self.create(create_data)
            logger.info(f"Created user: {created_user.email} (ID: {created_user.id})")
            return created_user
        except ValueError as e:
            logger.error(f"User validation failed: {e}")
            raise

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address (case-insensitive).

        Args:
            email: Email address to search for

        Returns:
            User instance if found, None otherwise
        """
        try:
            normalized_email = email.lower().strip()
            result = await self.db.execute(select(User).where(User.email == normalized_email))
            return result.scalar_one_or_none()
        except Exception as e:
            logger.error(f"Failed to get user by email {email}: {e}")
            raise

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """
        Authenticate user with email and password.

        Returns:
            User instance if authentication successful, None otherwise
        """
        user = await self.get_by_email(email)

        if not user:
            logger.debug(f"Authentication failed: user {email} not found")
            return None

        if not user.is_active:
            logger.debug(f"Authentication failed: user {email} is inactive")
            return None

        if not user.has_password:
            logger.debug(f"Authentication failed: {email} has no password credential")
            return None

        if not user.verify_password(password):
            logger.debug(f"Authentication failed: invalid password for {email}")
            return None

        logger.info(f"User authenticated successfully: {email}")
        return user

    async def update_password(self, user: User, new_password: str) -> User:
        """Hash and store a new password."""
        return await self.update(user, {"hashed_password": User.hash_password(new_password)})

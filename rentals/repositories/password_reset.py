"""
Password reset token repository.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from rentals.repositories.base import BaseRepository
from rentals.models.password_reset import PasswordReset
from typing import Optional


class PasswordResetRepository(BaseRepository[PasswordReset]):
    def __init__(self, db: AsyncSession):
        super().__init__(PasswordReset, db)

    async def get_by_token(self, token: str) -> Optional[PasswordReset]:
        result = await self.db.execute(select(PasswordReset).where(PasswordReset.token == token))
        return result.scalar_one_or_none()

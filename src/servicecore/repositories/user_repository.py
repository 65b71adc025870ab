"""
User repository for handling user-specific database operations.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from ..models.user import User
from ..schemas.user import USER_COLUMN_MAP, USER_WRITABLE_FIELDS, UserCreate, UserEntity, UserUpdate
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[UserEntity, UserCreate, UserUpdate]):
    """
    Repository for User entity operations.

    Inherits the generic paginated CRUD from `BaseRepository` and adds
    email lookups.
    """

    def __init__(self, db: AsyncSession, **kwargs):
        super().__init__(
            db,
            User,
            UserEntity,
            USER_COLUMN_MAP,
            USER_WRITABLE_FIELDS,
            **kwargs,
        )

    async def get_by_email(self, email: str) -> UserEntity | None:
        """
        Get an active user by email address.

        Emails are stored lower-case, so the lookup is case-insensitive.
        """
        user = await self.find_one({"email": email.strip().lower()})
        if user is None:
            logger.debug("repo.get_by_email.miss", extra={"model": self.model_name})
        return user

    async def email_taken(self, email: str) -> bool:
        return await self.exists({"email": email.strip().lower()})

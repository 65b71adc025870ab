import logging
from typing import Any

from ..exceptions import AppError
from ..messages import MessageCode
from ..repositories.user_repository import UserRepository
from ..schemas.audit import AuditAction
from ..schemas.user import UserCreate, UserEntity, UserUpdate
from .base_service import BaseService, changed_fields

logger = logging.getLogger(__name__)


class UserService(BaseService[UserRepository]):
    resource = "User"

    async def create(self, data: UserCreate, *, actor: str | None = None) -> UserEntity:
        async with self.repo.transaction():
            if await self.repo.email_taken(data.email):
                logger.info("user.create.duplicate_email", extra={"resource": self.resource})
                raise AppError.from_code(MessageCode.DUPLICATE_EMAIL, {"email": data.email})
            created = await self.repo.save(data, actor=actor)
            await self._record(AuditAction.CREATE, created.id, actor=actor)
        return created

    async def update(self, entity_id: Any, data: UserUpdate, *, actor: str | None = None) -> UserEntity:
        async with self.repo.transaction():
            current = await self.get(entity_id)

            if data.email is not None and data.email != current.email:
                if await self.repo.email_taken(data.email):
                    raise AppError.from_code(MessageCode.DUPLICATE_EMAIL, {"email": data.email})

            updated = await self.repo.update(current.id, data, actor=actor)
            if updated is not None:
                await self._record(AuditAction.UPDATE, current.id, actor=actor, metadata=changed_fields(data))

        if updated is None:
            raise AppError.from_code(MessageCode.NOT_FOUND, {"resource": self.resource})
        return updated

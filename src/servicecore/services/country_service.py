import logging
from typing import Any

from ..exceptions import AppError
from ..messages import MessageCode
from ..repositories.country_repository import CountryRepository
from ..schemas.audit import AuditAction
from ..schemas.country import CountryCreate, CountryEntity, CountryUpdate
from .base_service import BaseService, changed_fields

logger = logging.getLogger(__name__)


class CountryService(BaseService[CountryRepository]):
    resource = "Country"

    def _duplicate(self) -> AppError:
        return AppError.from_code(MessageCode.DUPLICATE_ENTRY, {"resource": self.resource, "field": "code"})

    async def create(self, data: CountryCreate, *, actor: str | None = None) -> CountryEntity:
        """Create a country; codes are unique among active countries."""
        async with self.repo.transaction():
            if await self.repo.get_by_code(data.code) is not None:
                logger.info("country.create.duplicate_code", extra={"resource": self.resource})
                raise self._duplicate()
            created = await self.repo.save(data, actor=actor)
            await self._record(AuditAction.CREATE, created.id, actor=actor)
        return created

    async def update(self, entity_id: Any, data: CountryUpdate, *, actor: str | None = None) -> CountryEntity:
        """
        Update a country. A changed code is conflict-checked and written in one
        transaction so a concurrent create cannot slip in between.
        """
        async with self.repo.transaction():
            current = await self.get(entity_id)

            if data.code is not None and data.code != current.code:
                clash = await self.repo.get_by_code(data.code)
                if clash is not None and clash.id != current.id:
                    logger.info("country.update.duplicate_code", extra={"resource": self.resource})
                    raise self._duplicate()

            updated = await self.repo.update(current.id, data, actor=actor)
            if updated is not None:
                await self._record(AuditAction.UPDATE, current.id, actor=actor, metadata=changed_fields(data))

        if updated is None:
            raise AppError.from_code(MessageCode.NOT_FOUND, {"resource": self.resource})
        return updated

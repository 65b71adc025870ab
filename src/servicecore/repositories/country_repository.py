"""
Country repository.

Adds code lookups on top of the generic BaseRepository CRUD.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from ..models.country import Country
from ..schemas.country import (
    COUNTRY_COLUMN_MAP,
    COUNTRY_WRITABLE_FIELDS,
    CountryCreate,
    CountryEntity,
    CountryUpdate,
)
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class CountryRepository(BaseRepository[CountryEntity, CountryCreate, CountryUpdate]):

    def __init__(self, db: AsyncSession, **kwargs):
        super().__init__(
            db,
            Country,
            CountryEntity,
            COUNTRY_COLUMN_MAP,
            COUNTRY_WRITABLE_FIELDS,
            **kwargs,
        )

    async def get_by_code(self, code: str) -> CountryEntity | None:
        """Active country with this code (codes are stored upper-case)."""
        country = await self.find_one({"code": code.strip().upper()})
        logger.debug("repo.get_by_code.done", extra={"model": self.model_name, "found": country is not None})
        return country

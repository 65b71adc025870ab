"""Fixtures for repository and service tests."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from servicecore.repositories.country_repository import CountryRepository
from servicecore.repositories.user_repository import UserRepository
from servicecore.schemas.country import CountryCreate, CountryEntity

# NOTE: All fixtures in this file depend on `db_session` from conftest.py


class TickingClock:
    """Deterministic clock: every call returns a time one second after the previous one."""

    def __init__(self, start: datetime | None = None):
        self.current = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.current = self.current + timedelta(seconds=1)
        return self.current


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
async def country_repository(db_session: AsyncSession, clock: TickingClock) -> CountryRepository:
    return CountryRepository(db_session, clock=clock)


@pytest.fixture
async def user_repository(db_session: AsyncSession, clock: TickingClock) -> UserRepository:
    return UserRepository(db_session, clock=clock)


@pytest.fixture
async def create_country(country_repository: CountryRepository):
    """
    Factory that persists a country:

        country = await create_country(code="FR", name="France")
    """

    async def _create(code: str = "US", name: str = "United States", **kwargs) -> CountryEntity:
        return await country_repository.save(CountryCreate(code=code, name=name), **kwargs)

    return _create


@pytest.fixture
async def created_country(create_country) -> CountryEntity:
    return await create_country()


@pytest.fixture
async def multiple_countries(create_country) -> list[CountryEntity]:
    """Three countries created in order, one clock tick apart."""
    return [
        await create_country(code="DE", name="Germany"),
        await create_country(code="AR", name="Argentina"),
        await create_country(code="JP", name="Japan"),
    ]


@pytest.fixture
async def create_user(user_repository: UserRepository):
    async def _create(name: str = "Ada Lovelace", email: str = "ada@example.com", **kwargs):
        return await user_repository.save({"name": name, "email": email}, **kwargs)

    return _create

"""
Core pytest configuration for the entire test suite.

Provides the database engine/session and logging setup shared by all tests.
Domain fixtures live in tests/test_fixtures/ and are re-exported at the bottom
of this module so every test module can use them without imports.
"""

from __future__ import annotations

import logging
import os
from typing import AsyncGenerator
from urllib.parse import urlparse

# Silence noisy third-party loggers before anything configures them.
NOISY_LOGGERS = (
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "asyncio",
    "httpx",
    "aiosqlite",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from servicecore.config.settings import Settings
from servicecore.core.logging.builder import setup_logging
from servicecore.database.base import Base
from servicecore import models  # noqa: F401 – import to register models with Base.metadata

logger = logging.getLogger(__name__)

SQLITE_MEMORY_URL = "sqlite+aiosqlite:///:memory:"


def safe_log_db_url(db_url: str) -> str:
    """Database URL without credentials, for logs."""
    parsed = urlparse(db_url)
    return f"{parsed.scheme}://{parsed.hostname or ''}:{parsed.port or ''}/{parsed.path.lstrip('/')}"


def get_test_database_url() -> str:
    """
    1. `TEST_DATABASE_URL` (CI against a real Postgres)
    2. in-memory SQLite otherwise
    """
    return os.getenv("TEST_DATABASE_URL") or SQLITE_MEMORY_URL


TEST_DATABASE_URL = get_test_database_url()


def make_test_settings(**overrides) -> Settings:
    values = {
        "ENV": "testing",
        "SERVICE_NAME": "servicecore-tests",
        "DATABASE_URL_OVERRIDE": TEST_DATABASE_URL,
        "LOG_FORMAT": "text",
        "LOG_LEVEL": "INFO",
        "LOG_TO_STDOUT": True,
        "INCLUDE_ERROR_STACK": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """Install the application logging configuration once for the test session."""
    setup_logging(make_test_settings())
    logger.info("Using test DB: %s", safe_log_db_url(TEST_DATABASE_URL))
    yield


@pytest.fixture()
def test_settings() -> Settings:
    return make_test_settings()


def _enable_sqlite_savepoints(engine: AsyncEngine) -> None:
    """
    pysqlite/aiosqlite begin transactions lazily, which breaks SAVEPOINT.
    Take over transaction control so begin_nested() works.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")


@pytest.fixture()
async def async_engine() -> AsyncGenerator[AsyncEngine, None]:
    """
    A fresh database per test.

    In-memory SQLite needs a StaticPool: every checkout must reuse the single
    connection that holds the database.
    """
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_async_engine(
            TEST_DATABASE_URL,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
        _enable_sqlite_savepoints(engine)
    else:
        engine = create_async_engine(TEST_DATABASE_URL, pool_pre_ping=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture()
async def db_session(async_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    maker = async_sessionmaker(bind=async_engine, class_=AsyncSession, expire_on_commit=False)
    async with maker() as session:
        yield session
        await session.rollback()


# Domain fixtures, registered globally
from .test_fixtures.repository_fixtures import (  # noqa: E402
    clock,
    country_repository,
    user_repository,
    create_country,
    created_country,
    multiple_countries,
    create_user,
)
from .test_fixtures.api_fixtures import app, client  # noqa: E402

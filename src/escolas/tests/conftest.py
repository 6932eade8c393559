"""
Core pytest configuration for the entire test suite.

Only the database setup and utilities needed by every kind of test live
here. Domain fixtures (repositories, services, sample data) are in:
- tests/test_fixtures/escola_fixtures.py
- tests/test_fixtures/api_fixtures.py
"""

from __future__ import annotations

import os
import logging
from pathlib import Path
from urllib.parse import urlparse
from typing import AsyncGenerator

# -------------------------------
# Early logging tuning
# -------------------------------
# Keep this block above the escolas imports so metadata registration and
# engine creation don't spam the test output.
NOISY_LOGGERS = (
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "aiosqlite",
    "asyncio",
    "httpx",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
    AsyncEngine,
)

from escolas.config.settings import Settings
from escolas.core.logging.builder import setup_logging, stop_queue_logging
from escolas.database.base import Base
from escolas import models  # noqa: F401 - registers every table on Base.metadata

logger = logging.getLogger(__name__)


def make_test_settings(**overrides) -> Settings:
    """Settings isolated from the developer's .env and environment-specific logging."""
    values = dict(
        ENV="testing",
        TESTING=True,
        LOG_LEVEL="INFO",
        LOG_FORMAT="text",
        LOG_TO_STDOUT=True,
        LOG_USE_QUEUE=False,
        DB_CREATE_TABLES=False,
    )
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return make_test_settings()


# The `autouse=True` part means every test gets the app's logging config
# without asking for it.
@pytest.fixture(scope="session", autouse=True)
def configure_logging(test_settings: Settings):
    """Install the application's dictConfig logging once for the session."""
    setup_logging(test_settings)
    yield
    stop_queue_logging()


# ------------------------------------------------------------------------------------------------
# Test database URL
# ------------------------------------------------------------------------------------------------


def safe_log_db_url(db_url: str) -> str:
    """Scheme, host, port and database only: credentials never reach the logs."""
    parsed = urlparse(db_url)
    return f"{parsed.scheme}://{parsed.hostname or ''}:{parsed.port or ''}/{parsed.path.lstrip('/')}"


def get_test_database_url(tmp_path: Path) -> str:
    """
    1. `TEST_DATABASE_URL` environment variable (CI against a real MySQL)
    2. otherwise a fresh SQLite file under the test's tmp_path
    """
    if test_url := os.getenv("TEST_DATABASE_URL"):
        return test_url
    return f"sqlite+aiosqlite:///{tmp_path / 'escolas_test.db'}"


# ------------------------------------------------------------------------------------------------
# DATABASE FIXTURES
# ------------------------------------------------------------------------------------------------


@pytest.fixture()
async def async_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """
    Engine with the schema created. Function-scoped: every test starts
    from empty tables, even when the code under test commits.
    """
    url = get_test_database_url(tmp_path)
    logger.debug("Using test DB: %s", safe_log_db_url(url))

    engine = create_async_engine(url, echo=False, pool_pre_ping=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
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
from escolas.tests.test_fixtures.escola_fixtures import (  # noqa: E402
    escola_repository,
    escola_service,
    sample_escola_data,
    make_escola,
    create_escola,
    created_escola,
)
from escolas.tests.test_fixtures.api_fixtures import (  # noqa: E402
    database,
    app,
    client,
)

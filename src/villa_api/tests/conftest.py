"""
Core pytest configuration for the entire test suite.

Only the database setup and logging live here. Domain fixtures (repositories,
services, HTTP client) are in `tests/test_fixtures/` and re-exported at the bottom
of this module so every test can use them without imports.
"""

# -------------------------------
# Standard library imports
# -------------------------------
import os
import logging
from urllib.parse import urlparse
from typing import AsyncGenerator

# -------------------------------
# Early logging tuning
# -------------------------------
# Quiet third-party loggers before they are imported anywhere (collection runs first).
NOISY_LOGGERS = (
    "faker",
    "faker.factory",
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.engine.Engine",
    "aiosqlite",
    "asyncio",
    "httpx",
)
for _name in NOISY_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)

# -------------------------------
# Third-party / project imports
# -------------------------------
import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
    AsyncEngine,
)

from villa_api.database.base import Base
from villa_api import models  # noqa: F401  registers every model on Base.metadata
from villa_api.config import get_settings
from villa_api.core.logging.builder import setup_logging, stop_queue_logging

settings = get_settings()
logger = logging.getLogger(__name__)


@pytest.fixture(scope="session", autouse=True)
def configure_logging():
    """Install the application's logging config once for the whole run."""
    setup_logging(settings)
    yield
    stop_queue_logging()


# ------------------------------------------------------------------------------------------------
# Test database URL
# ------------------------------------------------------------------------------------------------

def safe_log_db_url(db_url: str) -> str:
    """Database URL without credentials, for log lines."""
    parsed = urlparse(db_url)
    if parsed.scheme.startswith("sqlite"):
        return db_url
    return f"{parsed.scheme}://{parsed.hostname}:{parsed.port or ''}/{parsed.path.lstrip('/')}"


def get_test_database_url(tmp_path) -> str:
    """
    1. `TEST_DATABASE_URL` environment variable (CI against a real server).
    2. Otherwise a fresh SQLite file inside the test's tmp_path.
    """
    if test_url := os.getenv("TEST_DATABASE_URL"):
        return test_url
    return f"sqlite+aiosqlite:///{tmp_path / 'villa_test.db'}"


# ------------------------------------------------------------------------------------------------
# DATABASE FIXTURES
# ------------------------------------------------------------------------------------------------

@pytest.fixture()
async def async_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """
    One engine and one empty schema per test.

    Tests commit for real (`save()` commits), so isolation comes from a fresh
    database rather than an outer transaction rolled back at the end.
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
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Factory for independent sessions, e.g. to verify what another request would see."""
    return async_sessionmaker(bind=async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture()
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


# Shared fixtures
from .test_fixtures.repository_fixtures import (  # noqa: E402,F401
    villa_repository,
    sample_villa_data,
    make_villa,
    created_villa,
    multiple_villas,
    count_villas,
)
from .test_fixtures.service_fixtures import (  # noqa: E402,F401
    villa_service,
    create_dto,
)
from .test_fixtures.api_fixtures import (  # noqa: E402,F401
    test_settings,
    test_app,
    client,
)

import logging
from villa_api.config import get_settings
from villa_api.database.base import Base
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    create_async_engine,
    async_sessionmaker,
    AsyncSession,
)

logger = logging.getLogger(__name__)

settings = get_settings()

# Create the AsyncEngine.
engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.SQLALCHEMY_ECHO,   # Set to False in production
    pool_pre_ping=True,              # Enables connection health checks
)

# `async_sessionmaker` returns an async session factory.
# Each call produces a fresh unit of work; sessions are never shared between requests.
AsyncSessionMaker = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def init_models() -> None:
    """Create missing tables. Schema migrations are out of scope for this service."""
    # make sure every model is registered on Base.metadata
    from villa_api import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("database.tables_ready", extra={"tables": sorted(Base.metadata.tables)})


async def dispose_engine() -> None:
    await engine.dispose()

"""
YDA Portal - Database Engine
============================
Async SQLAlchemy engine, session factory and the declarative base shared by
the API, the admin console gateways, scripts and Alembic.
"""

from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from yda_portal.core.config import get_settings
from yda_portal.core.logging import get_logger

settings = get_settings()
logger = get_logger("database")

engine = create_async_engine(
    settings.database_url,
    echo=settings.db_echo,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_pre_ping=True,
)

# Routes serialize rows after commit.
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncIterator[AsyncSession]:
    """Request-scoped session. Uncommitted work is rolled back on error."""
    async with async_session() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create missing tables in development; every other environment migrates with Alembic."""
    if settings.app_env.lower() != "development":
        logger.info("database_schema_managed_by_alembic", env=settings.app_env)
        return
    import yda_portal.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

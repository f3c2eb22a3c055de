"""
Database engine and session management.

One async engine per process, built from settings.database_url. Request
handlers get a session through get_session; the import and deck routes
rely on it committing once per request.
"""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from cardport.config import settings
from cardport.models.db import Base

logger = logging.getLogger(__name__)

engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
)

# Objects stay readable after commit; import responses are built from them
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a database session.

    Commits when the request handler returns. A database error rolls the
    whole request back; per-card failures inside an import are already
    isolated by savepoints and never reach this point.
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except SQLAlchemyError as e:
            logger.warning("session_rolled_back", extra={"error_type": type(e).__name__})
            await session.rollback()
            raise


async def init_db(bind: AsyncEngine | None = None) -> None:
    """
    Create the catalog, collection and deck tables if they are missing.

    Called once at application startup. Existing tables are left as they are.
    """
    target = bind or engine
    async with target.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    logger.info(
        "database_initialized",
        extra={"tables": sorted(Base.metadata.tables), "dialect": target.dialect.name},
    )

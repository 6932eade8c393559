"""
Database resource handle.

`Database` owns the AsyncEngine (and so the connection pool) plus the session
factory. It is built once at startup (see main.py lifespan), stored on
`app.state.database`, handed to request handlers through `get_async_session`,
and disposed at shutdown. Nothing in the package creates an engine at import
time.
"""

import logging
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    create_async_engine,
    async_sessionmaker,
    AsyncSession,
)

from escolas.config.settings import Settings
from escolas.database.base import Base

logger = logging.getLogger(__name__)


class Database:
    """
    Engine + session factory pair with an explicit lifecycle.

    Args:
        engine: the AsyncEngine to use; its pool bounds concurrent DB access.
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        self.sessionmaker = async_sessionmaker(
            bind=engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        """
        Build the engine from settings.

        The pool holds DB_POOL_SIZE connections with no overflow; when all are
        checked out, further requests wait for one to be returned
        (DB_POOL_TIMEOUT=None waits indefinitely).
        """
        url = settings.DATABASE_URL
        engine_kwargs: dict = {
            "echo": settings.SQLALCHEMY_ECHO,
            "pool_pre_ping": True,  # connection health checks
        }
        # SQLite (local runs/tests) uses its own pool classes without sizing options
        if not url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=settings.DB_POOL_SIZE,
                max_overflow=0,
                pool_timeout=settings.DB_POOL_TIMEOUT,
            )

        engine = create_async_engine(url, **engine_kwargs)
        logger.info(
            "database.engine_created",
            extra={"dialect": engine.dialect.name, "pool_size": settings.DB_POOL_SIZE},
        )
        return cls(engine)

    async def create_tables(self) -> None:
        """Create missing tables. Safe to call repeatedly."""
        # make sure every model is registered on Base.metadata
        from escolas import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database.tables_ready")

    async def dispose(self) -> None:
        """Close every pooled connection."""
        await self.engine.dispose()
        logger.info("database.disposed")


async def get_async_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency. Yields a session from the app's Database and closes it
    after the request, returning its connection to the pool.

    Usage:
        async def endpoint(db: AsyncSession = Depends(get_async_session)):
            await db.execute(...)
    """
    database: Database = request.app.state.database
    async with database.sessionmaker() as session:
        yield session

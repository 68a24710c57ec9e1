"""
Store access: one async engine per application, opened at startup and
disposed at shutdown
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from errors import StorageError
from models import Base

logger = structlog.get_logger()


class Database:
    def __init__(self, url: str):
        self.url = url
        self.engine: Optional[AsyncEngine] = None
        self._session_factory = None

    async def connect(self) -> None:
        """Create the engine and make sure every table exists"""
        self.engine = create_async_engine(self.url, echo=False, pool_pre_ping=True)
        self._session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info("database_initialized", url=self.engine.url.render_as_string(hide_password=True))

    async def dispose(self) -> None:
        if self.engine is not None:
            await self.engine.dispose()
        self.engine = None
        self._session_factory = None

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Unit of work; database failures come out as StorageError"""
        if self._session_factory is None:
            raise StorageError("Database is not connected")

        async with self._session_factory() as session:
            try:
                yield session
            except SQLAlchemyError as e:
                await session.rollback()
                logger.error("storage_error", error=str(e))
                raise StorageError(str(e)) from e

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.platform.db.base import Base
from app.platform.logger import get_logger

logger = get_logger(__name__)


class Database:
    """
    Explicitly constructed database client.

    The process entry point owns the lifecycle: call `connect()` on startup
    and `close()` on shutdown. Nothing in the pipeline opens its own engine.
    """

    def __init__(self, url: str, echo: bool = False):
        self.url = url
        self.echo = echo
        self._engine: Optional[AsyncEngine] = None
        self._sessionmaker: Optional[async_sessionmaker] = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise RuntimeError("Database is not connected; call connect() first")
        return self._engine

    async def connect(self) -> None:
        if self._engine is not None:
            return

        engine_kwargs = {"echo": self.echo, "future": True, "pool_pre_ping": True}
        if not self.url.startswith("sqlite"):
            engine_kwargs.update(
                pool_recycle=1800,
                pool_size=20,
                max_overflow=30,  # (burst capacity)
                pool_timeout=30,
            )

        self._engine = create_async_engine(self.url, **engine_kwargs)
        self._sessionmaker = async_sessionmaker(
            self._engine, expire_on_commit=False, autoflush=False, autocommit=False
        )
        logger.info("Database engine created")

    async def close(self) -> None:
        if self._engine is None:
            return
        await self._engine.dispose()
        self._engine = None
        self._sessionmaker = None
        logger.info("Database engine disposed")

    async def create_tables(self) -> None:
        """Create all tables (local/dev and tests; production uses alembic)."""
        # Register models on the metadata.
        import app.features.reports.models.report  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        if self._sessionmaker is None:
            raise RuntimeError("Database is not connected; call connect() first")
        async with self._sessionmaker() as session:
            yield session

    async def ping(self) -> bool:
        if self._engine is None:
            return False
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning(f"Database ping failed: {e}")
            return False

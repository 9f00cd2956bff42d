"""
Database engine and async session management

The engine is owned by a Database object that the application builds once
and hands down; nothing here keeps a module-level connection.
"""
import logging
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from airbooking.core.config import Settings

logger = logging.getLogger(__name__)

# Declarative base for models
Base = declarative_base()


class Database:
    """Owns one async engine and its session factory."""

    def __init__(self, url: str, echo: bool = False, settings: Optional[Settings] = None):
        self.url = url
        self.dialect = url.split(":", 1)[0].split("+", 1)[0]

        engine_kwargs = {"echo": echo, "pool_pre_ping": True}
        if self.dialect != "sqlite" and settings is not None:
            engine_kwargs.update(
                pool_size=settings.DB_POOL_SIZE,
                max_overflow=settings.DB_MAX_OVERFLOW,
                pool_timeout=settings.DB_POOL_TIMEOUT,
                pool_recycle=settings.DB_POOL_RECYCLE,
            )

        self.engine = create_async_engine(url, **engine_kwargs)
        if self.dialect == "sqlite":
            self._setup_sqlite()

        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,  # Keep objects readable after commit
            autoflush=False,
        )
        logger.info(f"Database configured for {self.dialect}")

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(settings.DATABASE_URL, echo=settings.DEBUG, settings=settings)

    def _setup_sqlite(self) -> None:
        """
        Let SQLAlchemy drive BEGIN itself so SAVEPOINTs and rollbacks behave,
        and turn on foreign keys.
        """

        @event.listens_for(self.engine.sync_engine, "connect")
        def on_connect(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

        @event.listens_for(self.engine.sync_engine, "begin")
        def on_begin(conn):
            conn.exec_driver_sql("BEGIN")

    def session(self) -> AsyncSession:
        return self.session_factory()

    async def ping(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def create_all(self) -> None:
        """
        Create tables.
        Only for development - use migrations in production.
        """
        # Import models so they register with Base
        import airbooking.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        """
        Drop all tables.
        WARNING: Use only in development/testing!
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding one session per request.

    Usage:
        @router.get("/flights")
        async def list_flights(db: AsyncSession = Depends(get_db)):
            ...
    """
    database: Database = request.app.state.database
    async with database.session() as session:
        yield session

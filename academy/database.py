"""Database Connection and Session Management"""

import re
import ssl
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from academy.config import Settings

# Base class for declarative models
Base = declarative_base()


def _prepare_postgres_url(database_url: str) -> tuple[str, dict]:
    """
    Convert postgresql:// to postgresql+asyncpg:// and translate sslmode.

    asyncpg uses ssl=SSLContext or True, not sslmode (asyncpg#737, SQLAlchemy#6275).
    """
    database_url = database_url.replace("postgresql://", "postgresql+asyncpg://")
    connect_args: dict = {}
    if re.search(r"[?&]sslmode=(require|required|verify-full)", database_url, re.I):
        _ssl_ctx = ssl.create_default_context()
        _ssl_ctx.check_hostname = False
        _ssl_ctx.verify_mode = ssl.CERT_NONE
        connect_args["ssl"] = _ssl_ctx
        database_url = re.sub(r"[?&]sslmode=[^&]+", "", database_url, flags=re.I)
        database_url = re.sub(r"\?&", "?", database_url).rstrip("?")
    if "?&" in database_url:
        database_url = database_url.replace("?&", "?")
    return database_url, connect_args


class Database:
    """
    Owns the async engine and session factory for one process.

    Created at startup (see ``academy.main.lifespan``), disposed at shutdown and
    handed to services that need a unit of work.
    """

    def __init__(self, settings: Settings, url: Optional[str] = None):
        raw_url = url or settings.DATABASE_URL
        timeout = settings.DB_STATEMENT_TIMEOUT_SECONDS

        if raw_url.startswith("sqlite"):
            self.url = raw_url.replace("sqlite://", "sqlite+aiosqlite://", 1) \
                if "+aiosqlite" not in raw_url else raw_url
            engine_kwargs: dict = {"connect_args": {"timeout": timeout}}
            if ":memory:" in self.url or self.url.rstrip("/").endswith("aiosqlite:"):
                # One shared connection, otherwise every checkout sees an empty database
                engine_kwargs["poolclass"] = StaticPool
        else:
            self.url, connect_args = _prepare_postgres_url(raw_url)
            connect_args["server_settings"] = {"statement_timeout": str(timeout * 1000)}
            engine_kwargs = {
                "connect_args": connect_args,
                "pool_pre_ping": True,
                "pool_size": settings.DB_POOL_SIZE,
                "max_overflow": settings.DB_MAX_OVERFLOW,
                "pool_timeout": settings.DB_POOL_TIMEOUT,
                "pool_recycle": settings.DB_POOL_RECYCLE,
            }

        self.engine = create_async_engine(self.url, echo=settings.DEBUG, **engine_kwargs)
        if self.engine.dialect.name == "sqlite":
            self._enable_sqlite_savepoints()

        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    def _enable_sqlite_savepoints(self) -> None:
        """pysqlite/aiosqlite defer BEGIN; take over transaction control so SAVEPOINT works."""

        @event.listens_for(self.engine.sync_engine, "connect")
        def _on_connect(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(self.engine.sync_engine, "begin")
        def _on_begin(conn):
            conn.exec_driver_sql("BEGIN")

    def session(self) -> AsyncSession:
        """New session; the caller owns its lifetime."""
        return self.session_factory()

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[AsyncSession]:
        """
        Unit of work: every write made through the yielded session commits
        together when the block exits, or rolls back if it raises.

        Example:
            ```python
            async with database.transaction() as session:
                session.add(invoice)
            ```
        """
        async with self.session_factory() as session:
            async with session.begin():
                yield session

    async def create_all(self) -> None:
        """Initialize database tables (development and tests only)"""
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        """Close database connections"""
        await self.engine.dispose()

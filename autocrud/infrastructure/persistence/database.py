"""Database connection and session management.

Wraps SQLAlchemy's async engine and session factory. One Database instance
lives on ``app.state.database``; each request receives its own session.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool


class Database:
    """Database connection and session management.

    Usage:
        db = Database("sqlite+aiosqlite:///./app.db")
        async with db.get_session() as session:
            ...
    """

    def __init__(
        self,
        database_url: str,
        echo: bool = False,
        **engine_options: Any,
    ) -> None:
        """Initialize database with connection parameters.

        Args:
            database_url: Async database URL.
            echo: If True, log all SQL statements.
            **engine_options: Extra create_async_engine() keyword arguments.
        """
        if database_url.startswith("sqlite") and ":memory:" in database_url:
            # One shared connection, otherwise every session sees an empty db
            engine_options.setdefault("poolclass", StaticPool)
            engine_options.setdefault("connect_args", {"check_same_thread": False})
        elif not database_url.startswith("sqlite"):
            engine_options.setdefault("pool_pre_ping", True)

        self.engine: AsyncEngine = create_async_engine(
            database_url, echo=echo, **engine_options
        )
        self.async_session = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def get_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide a session that commits on success and rolls back on error.

        Yields:
            AsyncSession: Database session for operations.
        """
        async with self.async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def create_all(self, base: type[DeclarativeBase]) -> None:
        """Create all tables registered on ``base.metadata``.

        Development/testing only; production schemas belong to migrations.
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(base.metadata.create_all)

    async def drop_all(self, base: type[DeclarativeBase]) -> None:
        """Drop all tables registered on ``base.metadata``."""
        async with self.engine.begin() as conn:
            await conn.run_sync(base.metadata.drop_all)

    async def close(self) -> None:
        """Dispose of the connection pool."""
        await self.engine.dispose()

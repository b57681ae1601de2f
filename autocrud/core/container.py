"""Composition root.

Application-scoped singletons and request-scoped dependencies:
- Settings (pydantic-settings)
- Logger (structlog console adapter)
- Database (SQLAlchemy async engine)
- Per-request database session

Adapters are imported lazily inside the factories so importing this module
never pulls in infrastructure.
"""

from collections.abc import AsyncGenerator
from functools import lru_cache
from typing import TYPE_CHECKING

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession

from autocrud.core.config import Settings, get_settings

if TYPE_CHECKING:
    from autocrud.domain.protocols import LoggerProtocol
    from autocrud.infrastructure.persistence.database import Database


# ============================================================================
# Application-Scoped Dependencies (Singletons)
# ============================================================================


def build_logger(settings: Settings) -> "LoggerProtocol":
    """Create a logger from settings.

    Adapter selection is centralized here (composition root):
    - development: ConsoleAdapter (human-readable)
    - testing/production: ConsoleAdapter (JSON)
    """
    from autocrud.infrastructure.logging.console_adapter import ConsoleAdapter

    return ConsoleAdapter(
        use_json=not settings.is_development,
        level=settings.log_level,
    )


@lru_cache()
def get_logger() -> "LoggerProtocol":
    """Return the logger for the cached environment settings.

    Returns:
        LoggerProtocol: Logger instance implementing the protocol.
    """
    return build_logger(get_settings())


def build_database(settings: Settings) -> "Database":
    """Create a database manager from settings.

    Usage:
        db = build_database(get_settings())
    """
    from autocrud.infrastructure.persistence.database import Database

    return Database(database_url=settings.database_url, echo=settings.db_echo)


# ============================================================================
# Request-Scoped Dependencies (Per-Request)
# ============================================================================


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Get database session (request-scoped).

    Uses the Database stored on ``app.state.database`` by create_app().

    Yields:
        Database session for request duration.

    Usage:
        @router.get("/posts")
        async def list_posts(session: AsyncSession = Depends(get_db_session)):
            ...
    """
    database = request.app.state.database
    async with database.get_session() as session:
        yield session

"""Async database engine and session management for the SQL backend.

Only async drivers are supported. Plain ``sqlite://`` and ``postgresql://``
URLs are upgraded to ``sqlite+aiosqlite://`` and ``postgresql+asyncpg://``
so that a conventional ``DATABASE_URL`` works unchanged.
"""

from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator

from sqlalchemy import URL, make_url, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from cortex.observability.logging import get_logger
from cortex.storage.base_model import Base

logger = get_logger(__name__)

ASYNC_DRIVERS = {
    "sqlite": "sqlite+aiosqlite",
    "postgresql": "postgresql+asyncpg",
    "postgres": "postgresql+asyncpg",
}


def to_async_url(url: str) -> URL:
    """Parse a database URL and make sure it names an async driver.

    Args:
        url: SQLAlchemy database URL

    Returns:
        Parsed URL with an async driver

    Raises:
        ValueError: If the URL names a synchronous driver explicitly
    """
    parsed = make_url(url)
    if parsed.drivername in ASYNC_DRIVERS:
        return parsed.set(drivername=ASYNC_DRIVERS[parsed.drivername])
    if parsed.drivername in ("sqlite+pysqlite", "postgresql+psycopg2"):
        raise ValueError(
            f"Database driver '{parsed.drivername}' is synchronous; use an async driver "
            "such as sqlite+aiosqlite or postgresql+asyncpg"
        )
    return parsed


class DatabaseConfig:
    """Database configuration.

    Attributes:
        url: Database URL; plain sqlite/postgresql URLs are accepted
        echo: Whether to log SQL statements (default: False)
        pool_size: Connection pool size, ignored for SQLite (default: 5)
        max_overflow: Maximum overflow connections, ignored for SQLite (default: 10)
    """

    def __init__(
        self,
        url: str = "sqlite+aiosqlite:///:memory:",
        echo: bool = False,
        pool_size: int = 5,
        max_overflow: int = 10,
    ):
        self.url = url
        self.echo = echo
        self.pool_size = pool_size
        self.max_overflow = max_overflow


class Database:
    """Async engine and session manager.

    Example:
        >>> db = Database(DatabaseConfig(url="sqlite:///./cortex.db"))
        >>> await db.create_tables()
        >>> async with db.session() as session:
        ...     await session.get(ContextModel, ("t1", "c1"))
    """

    def __init__(self, config: DatabaseConfig):
        """Create the engine and session factory.

        Args:
            config: Database configuration

        Raises:
            ValueError: If the URL names a synchronous driver
        """
        self.config = config
        self.url = to_async_url(config.url)

        engine_kwargs: dict[str, Any] = {"echo": config.echo}
        if self.url.get_backend_name() != "sqlite":
            engine_kwargs.update(
                pool_size=config.pool_size,
                max_overflow=config.max_overflow,
                pool_pre_ping=True,
            )

        self.engine = create_async_engine(self.url, **engine_kwargs)
        self.session_factory = async_sessionmaker(self.engine, expire_on_commit=False)

    @property
    def safe_url(self) -> str:
        """The database URL with its password masked, for logging."""
        return self.url.render_as_string(hide_password=True)

    async def create_tables(self) -> None:
        """Create the Cortex tables if they do not exist."""
        import cortex.storage.models  # noqa: F401  (registers tables on Base.metadata)

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("database_tables_created", url=self.safe_url)

    async def drop_tables(self) -> None:
        """Drop the Cortex tables."""
        import cortex.storage.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Open a session that commits on success and rolls back on error."""
        async with self.session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def close(self) -> None:
        """Dispose the engine and its pooled connections."""
        await self.engine.dispose()

    async def health_check(self) -> bool:
        """Run ``SELECT 1`` against the database.

        Raises:
            sqlalchemy.exc.SQLAlchemyError: If the database cannot be reached
        """
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True

"""Store handle: SQLAlchemy async engine lifecycle for the embedded database."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator, Optional

from sqlalchemy import event, text
from sqlalchemy.engine import Dialect
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from db_studio.models.config import DatabaseConfig

logger = logging.getLogger(__name__)


def _enable_foreign_keys(dbapi_connection, connection_record) -> None:
    """SQLite leaves foreign key enforcement off per connection by default."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class DatabaseConnection:
    """Owns the async engine shared by the catalog, executor and mutator.

    Constructed by the composition root and passed to each component; the
    engine's own locking serializes writers, nothing is added on top.
    """

    def __init__(self, config: DatabaseConfig):
        """
        Initialize database connection.

        Args:
            config: Database configuration with connection URL
        """
        self.config = config
        self.engine: Optional[AsyncEngine] = None
        self._dialect = config.dialect
        self._driver = config.driver

    async def initialize(self) -> None:
        """Create the async engine. Safe to call more than once."""
        if self.engine is not None:
            return  # Already initialized

        database_path = self.config.database_path
        if database_path is not None:
            Path(database_path).parent.mkdir(parents=True, exist_ok=True)

        self.engine = create_async_engine(
            self.config.url,
            echo=self.config.echo_sql,
        )
        event.listen(self.engine.sync_engine, "connect", _enable_foreign_keys)
        logger.info(f"Opened {self._dialect}+{self._driver} store at {self.config.url}")

    async def dispose(self) -> None:
        """Dispose of the engine and cleanup resources."""
        if self.engine is not None:
            await self.engine.dispose()
            self.engine = None
            logger.info("Store closed")

    def _require_engine(self) -> AsyncEngine:
        if self.engine is None:
            raise RuntimeError(
                "DatabaseConnection not initialized. Call initialize() first."
            )
        return self.engine

    @asynccontextmanager
    async def get_connection(self) -> AsyncGenerator[AsyncConnection, None]:
        """
        Get a connection for reads as an async context manager.

        Raises:
            RuntimeError: If engine not initialized
        """
        engine = self._require_engine()
        async with engine.connect() as conn:
            yield conn

    @asynccontextmanager
    async def begin(self) -> AsyncGenerator[AsyncConnection, None]:
        """
        Get a connection inside a transaction that commits on success.

        Raises:
            RuntimeError: If engine not initialized
        """
        engine = self._require_engine()
        async with engine.begin() as conn:
            yield conn

    @property
    def dialect(self) -> str:
        """Get database dialect name."""
        return self._dialect

    @property
    def driver(self) -> str:
        """Get database driver name."""
        return self._driver

    @property
    def sa_dialect(self) -> Dialect:
        """The SQLAlchemy dialect object of the initialized engine."""
        return self._require_engine().dialect

    @property
    def is_initialized(self) -> bool:
        """Check if engine is initialized."""
        return self.engine is not None

    async def test_connection(self) -> bool:
        """
        Test database connectivity.

        Returns:
            True if connection successful, False otherwise
        """
        try:
            async with self.get_connection() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception:
            return False

    async def get_version(self) -> str:
        """Get the store's version string."""
        async with self.get_connection() as conn:
            result = await conn.execute(text("SELECT sqlite_version()"))
            row = result.fetchone()
            return str(row[0]) if row else "Unknown"

    async def __aenter__(self) -> "DatabaseConnection":
        """Async context manager entry."""
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.dispose()

# eniqilo_store/database/database.py
import asyncpg
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncIterator, Optional
from ..config import Config
from ..errors import StorageError, DRIVER_ERRORS

class Database:
    """Owns the connection pool and hands out scoped connections"""

    def __init__(self):
        self.pool: Optional[asyncpg.Pool] = None
        self.logger = logging.getLogger(__name__)

    async def connect(self):
        """Create the pool and apply pending migrations"""
        if not Config.DATABASE_URL:
            raise ValueError("No DATABASE_URL set in environment")
        try:
            self.pool = await asyncpg.create_pool(
                Config.DATABASE_URL,
                min_size=Config.DB_POOL_MIN_SIZE,
                max_size=Config.DB_POOL_MAX_SIZE
            )

            await self._run_migrations()

            self.logger.info("Database connection established")
        except Exception as e:
            self.logger.error(f"Error connecting to database: {e}")
            raise

    async def close(self):
        """Close the pool"""
        if self.pool:
            await self.pool.close()
            self.logger.info("Database connection closed")

    @asynccontextmanager
    async def connection(self) -> AsyncIterator[asyncpg.Connection]:
        """Pooled connection without an explicit transaction"""
        try:
            async with self.pool.acquire() as conn:
                yield conn
        except DRIVER_ERRORS as e:
            raise StorageError(str(e)) from e

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[asyncpg.Connection]:
        """Unit of work: commits on normal exit, rolls back on any exception.

        Cancellation is an exception here too, so an abandoned caller never
        leaves the transaction half applied.
        """
        try:
            async with self.pool.acquire() as conn:
                async with conn.transaction():
                    yield conn
        except DRIVER_ERRORS as e:
            raise StorageError(str(e)) from e

    async def _run_migrations(self):
        """Apply migrations that have not run yet"""
        try:
            migrations_path = Path(__file__).parent / "migrations"

            async with self.pool.acquire() as conn:
                await conn.execute("""
                    CREATE TABLE IF NOT EXISTS migrations (
                        id SERIAL PRIMARY KEY,
                        name VARCHAR(255) NOT NULL,
                        applied_at TIMESTAMP WITH TIME ZONE DEFAULT CURRENT_TIMESTAMP
                    )
                """)

                for migration_file in sorted(migrations_path.glob("*.sql")):
                    migration_name = migration_file.name

                    is_applied = await conn.fetchval(
                        "SELECT COUNT(*) FROM migrations WHERE name = $1",
                        migration_name
                    )

                    if not is_applied:
                        async with conn.transaction():
                            await conn.execute(migration_file.read_text())
                            await conn.execute(
                                "INSERT INTO migrations (name) VALUES ($1)",
                                migration_name
                            )

                        self.logger.info(f"Migration {migration_name} applied")

        except Exception as e:
            self.logger.error(f"Error running migrations: {e}")
            raise

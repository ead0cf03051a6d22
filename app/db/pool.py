"""
PostgreSQL connection pool manager using psycopg_pool.

The reminder pipeline only issues a handful of read queries per run, so the
pool stays small; it exists mainly so the HTTP trigger and the worker share
one lifecycle.
"""

import asyncio
import time
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

import psycopg
from psycopg import sql
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from app.config import settings
from app.infrastructure.observability.logging import get_logger

logger = get_logger(__name__)


class DatabasePoolManager:
    """Owns the async connection pool and its open/close lifecycle."""

    def __init__(self):
        self.pool: AsyncConnectionPool | None = None
        self._initialized = False
        self._closed = False

    @property
    def initialized(self) -> bool:
        return self._initialized and not self._closed

    async def initialize(self) -> None:
        """Initialize the connection pool on application startup."""
        if self._initialized:
            logger.warning("Database pool already initialized")
            return

        if self._closed:
            raise RuntimeError("Cannot reinitialize closed pool")

        pool_config = settings.get_db_pool_config()

        try:
            logger.info("Initializing database connection pool")

            self.pool = AsyncConnectionPool(
                conninfo=settings.DATABASE_URL,
                open=False,
                check=AsyncConnectionPool.check_connection,
                configure=self._configure_connection,
                **pool_config,
            )
            await self.pool.open()
            await self.pool.wait()
            self._initialized = True

            logger.info(
                "Database pool initialized successfully",
                min_size=pool_config["min_size"],
                max_size=pool_config["max_size"],
                timeout=pool_config["timeout"],
            )

        except Exception as e:
            logger.error("Failed to initialize database pool", error=str(e))
            self._initialized = False
            if self.pool:
                try:
                    await self.pool.close()
                except Exception as cleanup_error:
                    logger.debug("Ignoring pool cleanup error", error=str(cleanup_error))
                self.pool = None
            raise RuntimeError(f"Database pool initialization failed: {e}") from e

    async def _configure_connection(self, conn: psycopg.AsyncConnection) -> None:
        """Configure each new connection from the pool."""
        conn.row_factory = dict_row
        await conn.set_autocommit(True)

        app_name = f"datekeeper-reminders-{settings.environment}"
        await conn.execute(sql.SQL("SET application_name = {}").format(sql.Literal(app_name)))

        # Window bounds are computed in UTC; keep the session aligned
        await conn.execute("SET timezone = 'UTC'")
        await conn.execute("SET statement_timeout = '60s'")

    async def close(self) -> None:
        """Close the connection pool gracefully."""
        if not self._initialized or self._closed:
            return

        try:
            logger.info("Closing database connection pool")
            if self.pool:
                await asyncio.wait_for(self.pool.close(), timeout=30.0)
            logger.info("Database pool closed successfully")

        except TimeoutError:
            logger.warning("Database pool close timed out, forcing shutdown")
        except Exception as e:
            logger.error("Error closing database pool", error=str(e))
        finally:
            self._initialized = False
            self._closed = True

    @asynccontextmanager
    async def connection(self) -> AsyncGenerator[psycopg.AsyncConnection, None]:
        """
        Get a connection from the pool.

        Usage:
            async with db_pool.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute("SELECT 1")
        """
        if not self._initialized:
            raise RuntimeError("Database pool not initialized. Call initialize() first.")

        if self._closed:
            raise RuntimeError("Database pool is closed")

        try:
            async with self.pool.connection() as conn:
                yield conn

        except Exception as e:
            logger.error("Database connection error", error=str(e), error_type=type(e).__name__)
            raise

    async def health_check(self) -> dict[str, Any]:
        """Connection round-trip check with pool statistics."""
        if not self.initialized:
            return {"healthy": False, "error": "Pool not initialized", "service": "database_pool"}

        start_time = time.time()
        try:
            async with self.connection() as conn:
                async with conn.cursor() as cur:
                    await cur.execute("SELECT 1 AS ok")
                    await cur.fetchone()

            stats = self.pool.get_stats()
            return {
                "healthy": True,
                "service": "database_pool",
                "connection_time_ms": round((time.time() - start_time) * 1000, 2),
                "pool_stats": {
                    "pool_size": stats.get("pool_size", 0),
                    "pool_available": stats.get("pool_available", 0),
                    "requests_waiting": stats.get("requests_waiting", 0),
                },
            }

        except Exception as e:
            logger.error("Database pool health check failed", error=str(e))
            return {
                "healthy": False,
                "service": "database_pool",
                "error": str(e),
                "error_type": type(e).__name__,
            }


# Global pool instance
db_pool = DatabasePoolManager()


async def get_db_connection():
    """Get database connection from pool."""
    return db_pool.connection()


async def db_health_check() -> dict[str, Any]:
    """Get database pool health status."""
    return await db_pool.health_check()

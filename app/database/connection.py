# app/database/connection.py
import asyncio
import asyncpg
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from fastapi import Request
import logging

logger = logging.getLogger(__name__)

class DatabaseConnection:
    """Explicitly constructed handle around one asyncpg pool per process"""

    def __init__(self, dsn: Optional[str], min_size: int = 1, max_size: int = 10):
        self.dsn = dsn
        self.min_size = min_size
        self.max_size = max_size
        self._pool: Optional[asyncpg.Pool] = None
        self._lock = asyncio.Lock()

    @property
    def is_connected(self) -> bool:
        return self._pool is not None

    async def get_pool(self) -> asyncpg.Pool:
        """Get or lazily create the connection pool"""
        if self._pool is not None:
            return self._pool

        # Concurrent first callers wait here so only one pool is ever created
        async with self._lock:
            if self._pool is None:
                if not self.dsn:
                    raise ValueError("DATABASE_URL environment variable not set")

                try:
                    self._pool = await asyncpg.create_pool(
                        self.dsn,
                        min_size=self.min_size,
                        max_size=self.max_size,
                        command_timeout=60
                    )
                    logger.info("Database connection pool created")
                except Exception as e:
                    logger.error(f"Failed to create database pool: {e}")
                    raise
        return self._pool

    @asynccontextmanager
    async def acquire(self) -> AsyncIterator[asyncpg.Connection]:
        """Lease one connection from the pool and always give it back"""
        pool = await self.get_pool()
        connection = await pool.acquire()
        try:
            yield connection
        finally:
            await pool.release(connection)

    async def close_pool(self):
        """Close database connection pool"""
        if self._pool:
            await self._pool.close()
            self._pool = None
            logger.info("Database connection pool closed")

def get_database(request: Request) -> DatabaseConnection:
    """FastAPI dependency returning the handle created at startup"""
    return request.app.state.db

"""
Tests for the asyncpg pool handle.
"""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from app.database.connection import DatabaseConnection


@pytest.fixture
def fake_pool():
    pool = Mock()
    pool.acquire = AsyncMock(return_value="connection")
    pool.release = AsyncMock()
    pool.close = AsyncMock()
    return pool


@pytest.fixture
def create_pool(monkeypatch, fake_pool):
    async def slow_create_pool(*args, **kwargs):
        await asyncio.sleep(0.01)
        return fake_pool

    mock = AsyncMock(side_effect=slow_create_pool)
    monkeypatch.setattr("app.database.connection.asyncpg.create_pool", mock)
    return mock


class TestDatabaseConnection:
    @pytest.mark.asyncio
    async def test_concurrent_first_callers_share_one_pool(self, create_pool, fake_pool):
        db = DatabaseConnection("postgresql://localhost/test")

        pools = await asyncio.gather(*(db.get_pool() for _ in range(5)))

        assert all(pool is fake_pool for pool in pools)
        assert create_pool.await_count == 1
        assert db.is_connected

    @pytest.mark.asyncio
    async def test_acquire_always_releases(self, create_pool, fake_pool):
        db = DatabaseConnection("postgresql://localhost/test")

        with pytest.raises(RuntimeError):
            async with db.acquire() as connection:
                assert connection == "connection"
                raise RuntimeError("query failed")

        fake_pool.release.assert_awaited_once_with("connection")

    @pytest.mark.asyncio
    async def test_missing_dsn_raises(self):
        db = DatabaseConnection(None)

        with pytest.raises(ValueError):
            await db.get_pool()

    @pytest.mark.asyncio
    async def test_close_pool(self, create_pool, fake_pool):
        db = DatabaseConnection("postgresql://localhost/test")
        await db.get_pool()

        await db.close_pool()

        fake_pool.close.assert_awaited_once()
        assert not db.is_connected

"""
Tests for NewsletterRepository against a mocked asyncpg connection.
"""

import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, Mock

import pytest

from app.database.newsletter_repository import NewsletterRepository


def _row(newsletter_id, **fields):
    row = {
        "id": newsletter_id,
        "title": "Issue 1",
        "description": "",
        "content": "<p>x</p>",
        "author": "Ed",
        "date": datetime(2024, 1, 1, tzinfo=timezone.utc),
        "image_url": "",
        "created_at": None,
        "updated_at": None,
    }
    row.update(fields)
    return row


@pytest.fixture
def connection():
    conn = Mock()
    conn.fetchrow = AsyncMock()
    conn.fetch = AsyncMock()
    return conn


class TestUpdate:
    @pytest.mark.asyncio
    async def test_only_supplied_columns_are_set(self, connection):
        newsletter_id = uuid.uuid4()
        connection.fetchrow.return_value = _row(newsletter_id, title="New", image_url="https://cdn/x.png")

        updated = await NewsletterRepository(connection).update(
            newsletter_id, {"title": "New", "image_url": "https://cdn/x.png"}
        )

        query, *params = connection.fetchrow.call_args.args
        assert "title = $1" in query
        assert "image_url = $2" in query
        assert "updated_at = CURRENT_TIMESTAMP" in query
        assert "WHERE id = $3" in query
        for column in ("description =", "content =", "author =", "date ="):
            assert column not in query
        assert params == ["New", "https://cdn/x.png", newsletter_id]
        assert updated["id"] == str(newsletter_id)

    @pytest.mark.asyncio
    async def test_unknown_columns_are_not_written(self, connection):
        newsletter_id = uuid.uuid4()
        connection.fetchrow.return_value = _row(newsletter_id)

        await NewsletterRepository(connection).update(newsletter_id, {"author": "Bo", "id": "other"})

        query, *params = connection.fetchrow.call_args.args
        assert "author = $1" in query
        assert "WHERE id = $2" in query
        assert params == ["Bo", newsletter_id]

    @pytest.mark.asyncio
    async def test_no_fields_falls_back_to_get(self, connection):
        newsletter_id = uuid.uuid4()
        connection.fetchrow.return_value = _row(newsletter_id)

        newsletter = await NewsletterRepository(connection).update(newsletter_id, {})

        query, *params = connection.fetchrow.call_args.args
        assert query.strip().startswith("SELECT")
        assert "UPDATE" not in query
        assert params == [newsletter_id]
        assert newsletter["title"] == "Issue 1"

    @pytest.mark.asyncio
    async def test_unknown_id_returns_none(self, connection):
        connection.fetchrow.return_value = None

        assert await NewsletterRepository(connection).update(uuid.uuid4(), {"title": "x"}) is None


class TestList:
    @pytest.mark.asyncio
    async def test_limit_is_parameterised(self, connection):
        connection.fetch.return_value = [_row(uuid.uuid4())]

        newsletters = await NewsletterRepository(connection).list(limit=5)

        query, *params = connection.fetch.call_args.args
        assert "ORDER BY date DESC LIMIT $1" in query
        assert params == [5]
        assert isinstance(newsletters[0]["id"], str)

    @pytest.mark.asyncio
    async def test_no_limit_returns_everything(self, connection):
        connection.fetch.return_value = []

        await NewsletterRepository(connection).list()

        query, *params = connection.fetch.call_args.args
        assert "ORDER BY date DESC" in query
        assert "LIMIT" not in query
        assert params == []


class TestCreateAndDelete:
    @pytest.mark.asyncio
    async def test_create_defaults_date_to_now(self, connection):
        connection.fetchrow.side_effect = lambda query, *params: _row(params[0], date=params[6])

        newsletter = await NewsletterRepository(connection).create(title="Issue 1")

        params = connection.fetchrow.call_args.args[1:]
        assert isinstance(params[0], uuid.UUID)
        assert params[1] == "Issue 1"
        assert params[6].tzinfo is not None
        assert newsletter["id"] == str(params[0])

    @pytest.mark.asyncio
    async def test_delete_reports_whether_a_row_went(self, connection):
        repository = NewsletterRepository(connection)

        connection.fetchrow.return_value = {"id": uuid.uuid4()}
        assert await repository.delete(uuid.uuid4()) is True

        connection.fetchrow.return_value = None
        assert await repository.delete(uuid.uuid4()) is False

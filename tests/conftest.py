"""
Shared fixtures: in-memory stand-ins for the asyncpg-backed repositories.

The fakes keep the same method names and return shapes as
app.database.*_repository so services and routes run unmodified on top of
them. No real database, SES or S3 access happens in the test suite.
"""

import os
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional

import pytest

# Mock environment variables before importing app modules
os.environ.setdefault("JWT_SECRET_KEY", "test-signing-secret")
os.environ.setdefault("ADMIN_EMAIL", "admin@example.com")
os.environ.setdefault("ADMIN_PASSWORD", "correct-horse")
os.environ.setdefault("BACKEND_URL", "https://api.example.com")
os.environ.pop("FROM_EMAIL", None)
os.environ.pop("IMAGE_BUCKET_NAME", None)

from app.newsletter.exceptions import AlreadySubscribedError


class FakeDatabase:
    """Looks like DatabaseConnection; hands out a placeholder connection."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.acquired = 0

    @asynccontextmanager
    async def acquire(self):
        if self.fail:
            raise ConnectionError("database unreachable")
        self.acquired += 1
        yield object()


class InMemorySubscriberRepository:
    def __init__(self, rows: Dict[str, Dict[str, Any]]):
        self.rows = rows

    async def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        for row in self.rows.values():
            if row["email"] == email:
                return dict(row)
        return None

    async def create(
        self,
        email: str,
        name: str,
        unsubscribe_token: str,
        status: str = "active",
        preferences: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Dict[str, Any]:
        if any(row["email"] == email for row in self.rows.values()):
            raise AlreadySubscribedError(email)

        subscriber_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc) + timedelta(microseconds=len(self.rows))
        self.rows[subscriber_id] = {
            "id": subscriber_id,
            "email": email,
            "name": name,
            "status": status,
            "unsubscribe_token": unsubscribe_token,
            "preferences": preferences or {},
            "signup_date": now,
            "last_engagement": None,
            "engagement_score": 0,
            "ip_address": ip_address,
            "user_agent": user_agent,
            "updated_at": now,
        }
        return dict(self.rows[subscriber_id])

    async def set_status(self, subscriber_id: str, status: str) -> Optional[Dict[str, Any]]:
        row = self.rows.get(subscriber_id)
        if row is None:
            return None
        row["status"] = status
        return dict(row)

    async def unsubscribe_by_token(self, token: str) -> Optional[Dict[str, Any]]:
        for row in self.rows.values():
            if row["unsubscribe_token"] == token:
                row["status"] = "unsubscribed"
                return dict(row)
        return None

    async def delete_by_token(self, token: str) -> bool:
        for subscriber_id, row in list(self.rows.items()):
            if row["unsubscribe_token"] == token:
                del self.rows[subscriber_id]
                return True
        return False

    async def list_all(self) -> List[Dict[str, Any]]:
        return sorted(
            (dict(row) for row in self.rows.values()),
            key=lambda row: row["signup_date"],
            reverse=True,
        )

    async def list_by_status(self, status: str) -> List[Dict[str, Any]]:
        return [dict(row) for row in self.rows.values() if row["status"] == status]

    async def count_by_status(self) -> Dict[str, int]:
        statuses = [row["status"] for row in self.rows.values()]
        return {
            "total": len(statuses),
            "active": statuses.count("active"),
            "unsubscribed": statuses.count("unsubscribed"),
            "pending": statuses.count("pending"),
        }


class InMemoryNewsletterRepository:
    def __init__(self, rows: Dict[str, Dict[str, Any]]):
        self.rows = rows

    async def create(self, title, description="", content="", author="", image_url="", date=None):
        newsletter_id = str(uuid.uuid4())
        now = datetime.now(timezone.utc)
        self.rows[newsletter_id] = {
            "id": newsletter_id,
            "title": title,
            "description": description,
            "content": content,
            "author": author,
            "image_url": image_url,
            "date": date or now,
            "created_at": now,
            "updated_at": now,
        }
        return dict(self.rows[newsletter_id])

    async def get(self, newsletter_id):
        row = self.rows.get(str(newsletter_id))
        return dict(row) if row else None

    async def list(self, limit=None):
        rows = sorted(self.rows.values(), key=lambda row: row["date"], reverse=True)
        if limit is not None:
            rows = rows[:limit]
        return [dict(row) for row in rows]

    async def update(self, newsletter_id, fields):
        row = self.rows.get(str(newsletter_id))
        if row is None:
            return None
        row.update(fields)
        return dict(row)

    async def delete(self, newsletter_id):
        return self.rows.pop(str(newsletter_id), None) is not None


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def failing_db():
    return FakeDatabase(fail=True)


@pytest.fixture
def subscriber_rows(monkeypatch):
    """Route every SubscriberRepository construction to one shared in-memory table."""
    rows: Dict[str, Dict[str, Any]] = {}
    factory = lambda connection: InMemorySubscriberRepository(rows)
    monkeypatch.setattr("app.newsletter.service.SubscriberRepository", factory)
    monkeypatch.setattr("app.services.dispatch_service.SubscriberRepository", factory)
    return rows


@pytest.fixture
def newsletter_rows(monkeypatch):
    rows: Dict[str, Dict[str, Any]] = {}
    factory = lambda connection: InMemoryNewsletterRepository(rows)
    monkeypatch.setattr("app.services.newsletter_service.NewsletterRepository", factory)
    return rows

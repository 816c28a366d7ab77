# app/database/subscriber_repository.py
import asyncpg
import json
from typing import Optional, Dict, Any, List
import uuid
from app.models.subscriber import SubscriberStatus
from app.newsletter.exceptions import AlreadySubscribedError
import logging

logger = logging.getLogger(__name__)

EMAIL_CONSTRAINT = "subscribers_email_key"

SUBSCRIBER_COLUMNS = """
    id, email, name, status, unsubscribe_token, preferences, signup_date,
    last_engagement, engagement_score, ip_address, user_agent, updated_at
"""

def _row_to_subscriber(row: Optional[asyncpg.Record]) -> Optional[Dict[str, Any]]:
    if row is None:
        return None

    subscriber = dict(row)
    subscriber['id'] = str(subscriber['id'])
    preferences = subscriber.get('preferences')
    if isinstance(preferences, str):
        subscriber['preferences'] = json.loads(preferences)
    elif preferences is None:
        subscriber['preferences'] = {}
    return subscriber

class SubscriberRepository:
    def __init__(self, connection: asyncpg.Connection):
        self.conn = connection

    async def get_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        """Get subscriber by normalized email"""
        query = f"SELECT {SUBSCRIBER_COLUMNS} FROM subscribers WHERE email = $1"
        return _row_to_subscriber(await self.conn.fetchrow(query, email))

    async def create(
        self,
        email: str,
        name: str,
        unsubscribe_token: str,
        status: str = SubscriberStatus.ACTIVE.value,
        preferences: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> Dict[str, Any]:
        """Insert a new subscriber; the token is stored with the first write"""
        query = f"""
            INSERT INTO subscribers (
                id, email, name, status, unsubscribe_token, preferences,
                ip_address, user_agent
            ) VALUES ($1, $2, $3, $4, $5, $6, $7, $8)
            RETURNING {SUBSCRIBER_COLUMNS}
        """

        try:
            row = await self.conn.fetchrow(
                query,
                uuid.uuid4(),
                email,
                name,
                status,
                unsubscribe_token,
                json.dumps(preferences) if preferences else None,
                ip_address,
                user_agent
            )
        except asyncpg.UniqueViolationError as e:
            if getattr(e, 'constraint_name', None) == EMAIL_CONSTRAINT:
                # Lost a race with a concurrent subscribe for the same email
                logger.warning(f"Concurrent subscription detected for: {email}")
                raise AlreadySubscribedError(email) from e
            raise

        logger.info(f"Created subscriber in database: {email}")
        return _row_to_subscriber(row)

    async def set_status(self, subscriber_id: str, status: str) -> Optional[Dict[str, Any]]:
        """Change status in place; the unsubscribe token is left untouched"""
        query = f"""
            UPDATE subscribers
            SET status = $1, updated_at = CURRENT_TIMESTAMP
            WHERE id = $2
            RETURNING {SUBSCRIBER_COLUMNS}
        """
        row = await self.conn.fetchrow(query, status, uuid.UUID(subscriber_id))
        return _row_to_subscriber(row)

    async def unsubscribe_by_token(self, token: str) -> Optional[Dict[str, Any]]:
        query = f"""
            UPDATE subscribers
            SET status = $1, updated_at = CURRENT_TIMESTAMP
            WHERE unsubscribe_token = $2
            RETURNING {SUBSCRIBER_COLUMNS}
        """
        row = await self.conn.fetchrow(query, SubscriberStatus.UNSUBSCRIBED.value, token)
        return _row_to_subscriber(row)

    async def delete_by_token(self, token: str) -> bool:
        row = await self.conn.fetchrow(
            "DELETE FROM subscribers WHERE unsubscribe_token = $1 RETURNING id",
            token
        )
        return row is not None

    async def list_all(self) -> List[Dict[str, Any]]:
        """All subscribers, newest signup first"""
        query = f"SELECT {SUBSCRIBER_COLUMNS} FROM subscribers ORDER BY signup_date DESC"
        rows = await self.conn.fetch(query)
        return [_row_to_subscriber(row) for row in rows]

    async def list_by_status(self, status: str) -> List[Dict[str, Any]]:
        query = f"""
            SELECT {SUBSCRIBER_COLUMNS} FROM subscribers
            WHERE status = $1
            ORDER BY signup_date
        """
        rows = await self.conn.fetch(query, status)
        return [_row_to_subscriber(row) for row in rows]

    async def count_by_status(self) -> Dict[str, int]:
        """Live counts from a single snapshot so the parts always add up"""
        row = await self.conn.fetchrow("""
            SELECT
                COUNT(*) as total,
                COUNT(*) FILTER (WHERE status = 'active') as active,
                COUNT(*) FILTER (WHERE status = 'unsubscribed') as unsubscribed,
                COUNT(*) FILTER (WHERE status = 'pending') as pending
            FROM subscribers
        """)
        return {
            'total': row['total'],
            'active': row['active'],
            'unsubscribed': row['unsubscribed'],
            'pending': row['pending']
        }

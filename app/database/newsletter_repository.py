# app/database/newsletter_repository.py
import asyncpg
from typing import Optional, Dict, Any, List
from datetime import datetime, timezone
import uuid
import logging

logger = logging.getLogger(__name__)

NEWSLETTER_COLUMNS = """
    id, title, description, content, author, date, image_url, created_at, updated_at
"""

UPDATABLE_FIELDS = ('title', 'description', 'content', 'author', 'date', 'image_url')

def _row_to_newsletter(row: Optional[asyncpg.Record]) -> Optional[Dict[str, Any]]:
    if row is None:
        return None
    newsletter = dict(row)
    newsletter['id'] = str(newsletter['id'])
    return newsletter

class NewsletterRepository:
    def __init__(self, connection: asyncpg.Connection):
        self.conn = connection

    async def create(
        self,
        title: str,
        description: str = "",
        content: str = "",
        author: str = "",
        image_url: str = "",
        date: Optional[datetime] = None
    ) -> Dict[str, Any]:
        query = f"""
            INSERT INTO newsletters (id, title, description, content, author, image_url, date)
            VALUES ($1, $2, $3, $4, $5, $6, $7)
            RETURNING {NEWSLETTER_COLUMNS}
        """
        row = await self.conn.fetchrow(
            query,
            uuid.uuid4(),
            title,
            description,
            content,
            author,
            image_url,
            date or datetime.now(timezone.utc)
        )
        logger.info(f"Created newsletter in database: {title}")
        return _row_to_newsletter(row)

    async def get(self, newsletter_id: uuid.UUID) -> Optional[Dict[str, Any]]:
        query = f"SELECT {NEWSLETTER_COLUMNS} FROM newsletters WHERE id = $1"
        return _row_to_newsletter(await self.conn.fetchrow(query, newsletter_id))

    async def list(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Newsletters sorted by date, most recent first"""
        query = f"SELECT {NEWSLETTER_COLUMNS} FROM newsletters ORDER BY date DESC"
        params = []
        if limit is not None:
            query += " LIMIT $1"
            params.append(limit)

        rows = await self.conn.fetch(query, *params)
        return [_row_to_newsletter(row) for row in rows]

    async def update(self, newsletter_id: uuid.UUID, fields: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """Set only the supplied columns"""
        updates = []
        params = []
        param_count = 1

        for field in UPDATABLE_FIELDS:
            if field in fields:
                updates.append(f"{field} = ${param_count}")
                params.append(fields[field])
                param_count += 1

        if not updates:
            # Nothing to update
            return await self.get(newsletter_id)

        updates.append("updated_at = CURRENT_TIMESTAMP")
        params.append(newsletter_id)

        query = f"""
            UPDATE newsletters
            SET {', '.join(updates)}
            WHERE id = ${param_count}
            RETURNING {NEWSLETTER_COLUMNS}
        """

        row = await self.conn.fetchrow(query, *params)
        return _row_to_newsletter(row)

    async def delete(self, newsletter_id: uuid.UUID) -> bool:
        row = await self.conn.fetchrow(
            "DELETE FROM newsletters WHERE id = $1 RETURNING id",
            newsletter_id
        )
        return row is not None

# app/database/schema.py
import asyncpg
import logging

logger = logging.getLogger(__name__)

SUBSCRIBERS_TABLE = '''
    CREATE TABLE IF NOT EXISTS subscribers (
        id UUID PRIMARY KEY,
        email VARCHAR(255) NOT NULL,
        name VARCHAR(100) NOT NULL DEFAULT '',
        status VARCHAR(20) NOT NULL DEFAULT 'pending'
            CHECK (status IN ('pending', 'active', 'unsubscribed')),
        unsubscribe_token VARCHAR(64) NOT NULL,
        preferences JSONB,
        signup_date TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        last_engagement TIMESTAMPTZ,
        engagement_score INTEGER NOT NULL DEFAULT 0,
        ip_address VARCHAR(45),
        user_agent TEXT,
        updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        CONSTRAINT subscribers_email_key UNIQUE (email),
        CONSTRAINT subscribers_unsubscribe_token_key UNIQUE (unsubscribe_token)
    )
'''

NEWSLETTERS_TABLE = '''
    CREATE TABLE IF NOT EXISTS newsletters (
        id UUID PRIMARY KEY,
        title VARCHAR(255) NOT NULL,
        description TEXT NOT NULL DEFAULT '',
        content TEXT NOT NULL DEFAULT '',
        author VARCHAR(255) NOT NULL DEFAULT '',
        date TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        image_url TEXT NOT NULL DEFAULT '',
        created_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMPTZ NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
'''

INDEXES = [
    "CREATE INDEX IF NOT EXISTS idx_subscribers_status ON subscribers(status)",
    "CREATE INDEX IF NOT EXISTS idx_subscribers_signup ON subscribers(signup_date)",
    "CREATE INDEX IF NOT EXISTS idx_newsletters_date ON newsletters(date DESC)",
]

async def init_schema(connection: asyncpg.Connection):
    """Create newsletter tables and indexes if they do not exist yet"""
    await connection.execute(SUBSCRIBERS_TABLE)
    await connection.execute(NEWSLETTERS_TABLE)

    for index_sql in INDEXES:
        await connection.execute(index_sql)

    logger.info("Newsletter schema is up to date")

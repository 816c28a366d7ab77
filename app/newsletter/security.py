# app/newsletter/security.py
import re
import secrets
import logging

logger = logging.getLogger(__name__)

# 32 random bytes -> 64 hex characters (256 bits)
UNSUBSCRIBE_TOKEN_BYTES = 32
UNSUBSCRIBE_TOKEN_LENGTH = UNSUBSCRIBE_TOKEN_BYTES * 2

_TOKEN_PATTERN = re.compile(r'^[0-9a-f]{%d}$' % UNSUBSCRIBE_TOKEN_LENGTH)

def generate_unsubscribe_token() -> str:
    """Generate a new unguessable unsubscribe token.

    Failure of the OS entropy source propagates; subscriber creation
    must fail rather than fall back to a weaker token.
    """
    return secrets.token_hex(UNSUBSCRIBE_TOKEN_BYTES)

def is_well_formed_token(token: str) -> bool:
    """Check token shape without touching the database"""
    return bool(token) and _TOKEN_PATTERN.match(token) is not None

def mask_token(token: str) -> str:
    """Token prefix safe for log lines"""
    return f"{token[:8]}..." if token else "<empty>"

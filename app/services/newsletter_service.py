# app/services/newsletter_service.py
import base64
import binascii
import re
import uuid
from typing import Optional, List, Dict, Any, Tuple
from app.config import settings
from app.database.connection import DatabaseConnection
from app.database.newsletter_repository import NewsletterRepository
from app.models.newsletter import NewsletterCreate, NewsletterUpdate
from app.newsletter.content import compose_content
from app.newsletter.exceptions import NewsletterNotFoundError
from app.services.storage_service import StorageService, storage_service
import logging

logger = logging.getLogger(__name__)

_DATA_URL_PREFIX = re.compile(r'^data:(image/([a-zA-Z0-9.+-]+));base64,')

def _parse_id(newsletter_id: str) -> uuid.UUID:
    """Malformed ids cannot match anything, so they are simply not found"""
    try:
        return uuid.UUID(str(newsletter_id))
    except ValueError:
        raise NewsletterNotFoundError(newsletter_id)

def _resolve_content(content: Optional[str], html: Optional[str], css: Optional[str]) -> Optional[str]:
    if content is not None:
        return content
    if html is not None or css is not None:
        return compose_content(css, html)
    return None

def decode_image_payload(image: str) -> Tuple[bytes, str, str]:
    """Decode a base64 image, with or without a data URL prefix.

    Returns (bytes, content type, file extension); PNG is assumed when the
    payload carries no data URL prefix.
    """
    image = image.strip()
    content_type, extension = "image/png", "png"

    match = _DATA_URL_PREFIX.match(image)
    if match:
        content_type, extension = match.group(1), match.group(2).split('+')[0]
        image = image[match.end():]

    try:
        return base64.b64decode(image, validate=True), content_type, extension
    except (binascii.Error, ValueError):
        raise ValueError("Image must be base64 encoded")

class NewsletterService:
    """Service for managing newsletter content"""

    def __init__(self, db: DatabaseConnection, storage: StorageService = None):
        self.db = db
        self.storage = storage or storage_service

    async def create(self, data: NewsletterCreate) -> Dict[str, Any]:
        content = _resolve_content(data.content, data.html, data.css) or ""

        async with self.db.acquire() as connection:
            newsletter = await NewsletterRepository(connection).create(
                title=data.title,
                description=data.description,
                content=content,
                author=data.author,
                image_url=data.image_url,
                date=data.date
            )

        logger.info(f"Newsletter created: {newsletter['id']} ({newsletter['title']})")
        return newsletter

    async def get(self, newsletter_id: str) -> Dict[str, Any]:
        parsed_id = _parse_id(newsletter_id)
        async with self.db.acquire() as connection:
            newsletter = await NewsletterRepository(connection).get(parsed_id)

        if newsletter is None:
            raise NewsletterNotFoundError(newsletter_id)
        return newsletter

    async def list(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        async with self.db.acquire() as connection:
            return await NewsletterRepository(connection).list(limit=limit)

    async def update(self, newsletter_id: str, data: NewsletterUpdate) -> Dict[str, Any]:
        """Partial update: fields absent from the request keep their value"""
        parsed_id = _parse_id(newsletter_id)
        supplied = data.model_dump(exclude_unset=True)

        fields = {
            key: value for key, value in supplied.items()
            if key in ('title', 'description', 'author', 'image_url', 'date')
        }
        # Explicit nulls on non-nullable columns are ignored
        fields = {key: value for key, value in fields.items() if value is not None}

        content = _resolve_content(
            supplied.get('content'), supplied.get('html'), supplied.get('css')
        )
        if content is not None:
            fields['content'] = content

        image = supplied.get('image')
        if image:
            if image.startswith('http://') or image.startswith('https://'):
                fields.setdefault('image_url', image)
            else:
                image_bytes, content_type, extension = decode_image_payload(image)
                if len(image_bytes) > settings.max_upload_bytes:
                    raise ValueError("Image is too large")

                # Nothing is stored for a newsletter that does not exist
                async with self.db.acquire() as connection:
                    if await NewsletterRepository(connection).get(parsed_id) is None:
                        raise NewsletterNotFoundError(newsletter_id)

                fields['image_url'] = await self.storage.upload_image(
                    image_bytes,
                    filename=f"newsletter-{parsed_id}.{extension}",
                    content_type=content_type
                )

        async with self.db.acquire() as connection:
            newsletter = await NewsletterRepository(connection).update(parsed_id, fields)

        if newsletter is None:
            raise NewsletterNotFoundError(newsletter_id)

        logger.info(f"Newsletter updated: {newsletter_id} (fields: {sorted(fields)})")
        return newsletter

    async def delete(self, newsletter_id: str) -> None:
        parsed_id = _parse_id(newsletter_id)
        async with self.db.acquire() as connection:
            deleted = await NewsletterRepository(connection).delete(parsed_id)

        if not deleted:
            raise NewsletterNotFoundError(newsletter_id)
        logger.info(f"Newsletter deleted: {newsletter_id}")

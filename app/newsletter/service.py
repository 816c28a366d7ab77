# app/newsletter/service.py
import logging
from dataclasses import dataclass
from typing import Dict, Any, List, Optional
from app.database.connection import DatabaseConnection
from app.database.subscriber_repository import SubscriberRepository
from app.models.subscriber import SubscriberStatus, SubscribeOutcome
from app.newsletter.exceptions import AlreadySubscribedError, SubscriberNotFoundError
from app.newsletter.security import generate_unsubscribe_token, is_well_formed_token, mask_token
from app.utils.validation import normalize_email, validate_email, sanitize_name

logger = logging.getLogger(__name__)

@dataclass
class SubscribeResult:
    outcome: SubscribeOutcome
    subscriber: Dict[str, Any]

class SubscriberService:
    """Subscriber lifecycle: subscribe, reactivate, unsubscribe, delete"""

    def __init__(self, db: DatabaseConnection):
        self.db = db

    async def subscribe(
        self,
        email: str,
        name: Optional[str] = None,
        preferences: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None
    ) -> SubscribeResult:
        """Create an active subscriber, or reactivate an existing inactive one.

        Raises ValueError for a missing or malformed email and
        AlreadySubscribedError when the email is already active.
        """
        email = normalize_email(email)
        if not email:
            raise ValueError("Email is required")
        if not validate_email(email):
            raise ValueError("Invalid email address")

        async with self.db.acquire() as connection:
            repo = SubscriberRepository(connection)

            existing = await repo.get_by_email(email)
            if existing:
                if existing['status'] == SubscriberStatus.ACTIVE.value:
                    logger.warning(f"User already subscribed: {email}")
                    raise AlreadySubscribedError(email)

                # Reactivate subscription, keeping the original token
                subscriber = await repo.set_status(existing['id'], SubscriberStatus.ACTIVE.value)
                if subscriber is None:
                    # Deleted between the read and the update
                    raise SubscriberNotFoundError(email)
                logger.info(f"Reactivated subscription: {email}")
                return SubscribeResult(SubscribeOutcome.REACTIVATED, subscriber)

            subscriber = await repo.create(
                email=email,
                name=sanitize_name(name),
                unsubscribe_token=generate_unsubscribe_token(),
                status=SubscriberStatus.ACTIVE.value,
                preferences=preferences,
                ip_address=ip_address,
                user_agent=user_agent
            )

        logger.info(f"Newsletter subscription created: {email}")
        return SubscribeResult(SubscribeOutcome.CREATED, subscriber)

    async def list_all(self) -> List[Dict[str, Any]]:
        async with self.db.acquire() as connection:
            return await SubscriberRepository(connection).list_all()

    async def list_active(self) -> List[Dict[str, Any]]:
        """Recipients eligible for dispatch, read live"""
        async with self.db.acquire() as connection:
            return await SubscriberRepository(connection).list_by_status(SubscriberStatus.ACTIVE.value)

    async def stats(self) -> Dict[str, int]:
        async with self.db.acquire() as connection:
            return await SubscriberRepository(connection).count_by_status()

    async def unsubscribe_by_token(self, token: str) -> Dict[str, Any]:
        # Malformed and unknown tokens share the same not-found outcome
        if not is_well_formed_token(token):
            logger.warning(f"Unsubscribe with malformed token: {mask_token(token)}")
            raise SubscriberNotFoundError(token)

        async with self.db.acquire() as connection:
            subscriber = await SubscriberRepository(connection).unsubscribe_by_token(token)

        if subscriber is None:
            logger.warning(f"Unsubscribe token not found: {mask_token(token)}")
            raise SubscriberNotFoundError(token)

        logger.info(f"Unsubscribed: {subscriber['email']}")
        return subscriber

    async def delete_by_token(self, token: str) -> None:
        if not is_well_formed_token(token):
            logger.warning(f"Delete with malformed token: {mask_token(token)}")
            raise SubscriberNotFoundError(token)

        async with self.db.acquire() as connection:
            deleted = await SubscriberRepository(connection).delete_by_token(token)

        if not deleted:
            logger.warning(f"Delete token not found: {mask_token(token)}")
            raise SubscriberNotFoundError(token)

        logger.info(f"Subscriber removed for token: {mask_token(token)}")

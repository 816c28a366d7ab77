# app/services/dispatch_service.py
from typing import Dict, Any, List
from app.database.connection import DatabaseConnection
from app.database.subscriber_repository import SubscriberRepository
from app.models.subscriber import SubscriberStatus
from app.services.email_service import EmailService, EmailResult, email_service
import logging

logger = logging.getLogger(__name__)

class DispatchService:
    """Delivers a newsletter to every active subscriber, best effort"""

    def __init__(self, db: DatabaseConnection, mailer: EmailService = None):
        self.db = db
        self.mailer = mailer or email_service

    async def dispatch(self, newsletter: Dict[str, Any]) -> List[EmailResult]:
        """Send `newsletter` to the subscribers active right now.

        Runs detached from the request that created the newsletter, so it
        never raises: failures are logged and reported in the results.
        """
        try:
            # Recipients are read at send time, not when the newsletter was created
            async with self.db.acquire() as connection:
                subscribers = await SubscriberRepository(connection).list_by_status(
                    SubscriberStatus.ACTIVE.value
                )
        except Exception as e:
            logger.error(f"Dispatch of newsletter {newsletter.get('id')} aborted, could not load subscribers: {e}")
            return []

        if not subscribers:
            logger.info(f"No active subscribers for newsletter {newsletter.get('id')}")
            return []

        logger.info(f"Dispatching newsletter {newsletter.get('id')} to {len(subscribers)} subscribers")

        try:
            results = await self.mailer.send_newsletter(newsletter, subscribers)
        except Exception as e:
            logger.error(f"Email send error for newsletter {newsletter.get('id')}: {e}")
            return [
                EmailResult(email=subscriber['email'], success=False, error=str(e))
                for subscriber in subscribers
            ]

        sent = sum(1 for result in results if result.success)
        failed = len(results) - sent
        logger.info(f"Newsletter {newsletter.get('id')} dispatched: {sent} sent, {failed} failed")
        return results

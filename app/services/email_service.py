# app/services/email_service.py - AWS SES newsletter delivery
import boto3
from botocore.exceptions import ClientError
from pydantic import BaseModel
from typing import Optional, Dict, Any, List
from app.config import settings
from app.newsletter.content import content_to_text
from html import escape
import logging
import asyncio
from concurrent.futures import ThreadPoolExecutor

logger = logging.getLogger(__name__)

NO_TRANSPORT_ERROR = "No email transporter configured"

class EmailResult(BaseModel):
    email: str
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None

def build_unsubscribe_url(token: str) -> str:
    return f"{settings.backend_url.rstrip('/')}/api/subscribers/unsubscribe/{token}"

def render_newsletter_html(
    newsletter: Dict[str, Any],
    subscriber: Dict[str, Any],
    unsubscribe_url: str
) -> str:
    """Create the personalised HTML body for one subscriber"""
    title = escape(newsletter.get('title') or '')
    description = newsletter.get('description') or ''
    image_url = newsletter.get('image_url') or ''
    name = subscriber.get('name')
    greeting = f"Hi {escape(name)}," if name else "Hello,"

    description_html = f"<p>{escape(description)}</p>" if description else ""
    image_html = (
        f'<img src="{escape(image_url, quote=True)}" alt="{title}" style="max-width: 100%; height: auto;">'
        if image_url else ""
    )

    return f"""
    <!DOCTYPE html>
    <html>
    <head>
        <meta charset="utf-8">
        <title>{title}</title>
        <style>
            body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
            .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
            .header {{ background: #f8f9fa; padding: 20px; text-align: center; }}
            .content {{ padding: 20px 0; }}
            .footer {{ background: #f8f9fa; padding: 20px; text-align: center; font-size: 12px; color: #666; }}
        </style>
    </head>
    <body>
        <div class="container">
            <div class="header">
                <h1>{title}</h1>
                {description_html}
            </div>
            <div class="content">
                <p>{greeting}</p>
                {newsletter.get('content') or ''}
                {image_html}
            </div>
            <div class="footer">
                <p>You're receiving this because you subscribed to {escape(settings.newsletter_name)}.</p>
                <p><a href="{escape(unsubscribe_url, quote=True)}">Unsubscribe</a></p>
            </div>
        </div>
    </body>
    </html>
    """

def render_newsletter_text(
    newsletter: Dict[str, Any],
    subscriber: Dict[str, Any],
    unsubscribe_url: str
) -> str:
    """Create the plain text body for one subscriber"""
    name = subscriber.get('name')
    greeting = f"Hi {name}," if name else "Hello,"
    parts = [
        newsletter.get('title') or '',
        newsletter.get('description') or '',
        greeting,
        content_to_text(newsletter.get('content')),
        "---",
        f"Unsubscribe: {unsubscribe_url}",
    ]
    return "\n\n".join(part for part in parts if part)

class EmailService:
    def __init__(self, ses_client=None, from_email: Optional[str] = None):
        self.from_email = from_email or settings.from_email
        self.support_email = settings.support_email
        self.ses_client = ses_client
        if self.ses_client is None and self.from_email:
            self.ses_client = boto3.client('sesv2', region_name=settings.aws_region)
        self.executor = ThreadPoolExecutor(max_workers=5)

        if self.ses_client is None:
            logger.warning("FROM_EMAIL is not set - newsletter delivery is disabled")
        else:
            logger.info(f"Email service initialized (from: {self.from_email}, region: {settings.aws_region})")

    @property
    def is_configured(self) -> bool:
        return self.ses_client is not None

    async def send_newsletter(
        self,
        newsletter: Dict[str, Any],
        subscribers: List[Dict[str, Any]]
    ) -> List[EmailResult]:
        """Send one personalised email per subscriber.

        Each recipient is attempted independently; a failure is recorded in
        that recipient's result and delivery continues with the next one.
        """
        results: List[EmailResult] = []

        for subscriber in subscribers:
            email = subscriber['email']
            try:
                if not self.is_configured:
                    raise RuntimeError(NO_TRANSPORT_ERROR)

                unsubscribe_url = build_unsubscribe_url(subscriber['unsubscribe_token'])
                result = await self._send_email_async(
                    to_email=email,
                    subject=newsletter['title'],
                    html_content=render_newsletter_html(newsletter, subscriber, unsubscribe_url),
                    text_content=render_newsletter_text(newsletter, subscriber, unsubscribe_url)
                )
                results.append(EmailResult(email=email, success=True, message_id=result.get('message_id')))
            except Exception as e:
                logger.error(f"Newsletter delivery failed for {email}: {e}")
                results.append(EmailResult(email=email, success=False, error=str(e) or type(e).__name__))

        return results

    async def _send_email_async(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: str,
        reply_to: Optional[str] = None
    ) -> Dict[str, Any]:
        """Send email using AWS SES (async wrapper)"""
        loop = asyncio.get_running_loop()

        # Run SES call in thread pool to avoid blocking
        return await loop.run_in_executor(
            self.executor,
            self._send_email_ses,
            to_email,
            subject,
            html_content,
            text_content,
            reply_to
        )

    def _send_email_ses(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: str,
        reply_to: Optional[str] = None
    ) -> Dict[str, Any]:
        """Send email using AWS SES"""
        email_params = {
            'FromEmailAddress': f"{settings.from_name} <{self.from_email}>",
            'Destination': {
                'ToAddresses': [to_email]
            },
            'Content': {
                'Simple': {
                    'Subject': {
                        'Data': subject,
                        'Charset': 'UTF-8'
                    },
                    'Body': {
                        'Html': {
                            'Data': html_content,
                            'Charset': 'UTF-8'
                        },
                        'Text': {
                            'Data': text_content,
                            'Charset': 'UTF-8'
                        }
                    }
                }
            }
        }

        reply_address = reply_to or self.support_email
        if reply_address:
            email_params['ReplyToAddresses'] = [reply_address]
        if settings.ses_configuration_set:
            email_params['ConfigurationSetName'] = settings.ses_configuration_set

        try:
            response = self.ses_client.send_email(**email_params)
        except ClientError as e:
            error_code = e.response['Error']['Code']
            error_message = e.response['Error']['Message']
            logger.error(f"SES error {error_code} for {to_email}: {error_message}")

            if error_code == 'MessageRejected':
                raise ValueError(f"Email rejected: {error_message}")
            elif error_code == 'MailFromDomainNotVerified':
                raise ValueError("Sender domain not verified with AWS SES")
            elif error_code == 'SendingPausedException':
                raise ValueError("SES sending is paused - check your account status")
            elif error_code == 'AccountSendingPausedException':
                raise ValueError("Account sending paused - likely due to bounce/complaint rate")
            else:
                raise ValueError(f"Email delivery failed: {error_message}")

        logger.info(f"Email sent to {to_email} (message id: {response.get('MessageId')})")
        return {
            'success': True,
            'message_id': response.get('MessageId'),
            'to_email': to_email
        }

# Global email service instance
email_service = EmailService()

"""Newsletter subscriptions and batched broadcasts."""

import asyncio
import re
from typing import Optional

from mealdeal.logging import get_logger
from mealdeal.logging.audit import AuditLogger
from mealdeal.models.newsletter import NewsletterStats
from mealdeal.security.permissions import PermissionChecker
from mealdeal.services.email_client import EmailClient, render_newsletter_html, unsubscribe_url
from mealdeal.storage.database import Database
from mealdeal.storage.postgres_newsletter_repo import PostgresNewsletterRepository

logger = get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_valid_email(email: Optional[str]) -> bool:
    return bool(email) and EMAIL_PATTERN.match(email) is not None


class NewsletterService:
    """Manages subscribers and sends newsletters in rate-limited batches."""

    def __init__(
        self,
        db: Database,
        email_client: EmailClient,
        permissions: PermissionChecker,
        app_url: str,
        batch_size: int = 50,
        batch_delay_seconds: float = 1.0,
    ):
        self.db = db
        self.email_client = email_client
        self.permissions = permissions
        self.app_url = app_url
        self.batch_size = batch_size
        self.batch_delay_seconds = batch_delay_seconds

    async def subscribe(self, email: str) -> tuple[bool, str]:
        """
        Subscribe an address, reactivating it if it had unsubscribed.

        Returns: (success, message)
        """
        email = (email or "").strip()
        if not email:
            return False, "Email is required"
        if not is_valid_email(email):
            return False, "Please enter a valid email address"

        async with self.db.session() as session:
            repo = PostgresNewsletterRepository(session)
            existing = await repo.get_subscription(email)

            if existing is not None and existing.is_active:
                return False, "This email is already subscribed to our newsletter"

            await repo.subscribe(email)

        if existing is not None:
            return True, "Successfully resubscribed to newsletter!"
        return True, "Successfully subscribed to newsletter!"

    async def unsubscribe(self, email: str) -> tuple[bool, str]:
        """
        Deactivate a subscription.

        Returns: (success, message)
        """
        email = (email or "").strip()
        if not email:
            return False, "Email is required"

        async with self.db.session() as session:
            repo = PostgresNewsletterRepository(session)
            existing = await repo.get_subscription(email)

            if existing is None:
                return False, "Email not found in newsletter subscriptions"
            if not existing.is_active:
                return True, "Email is already unsubscribed"

            await repo.unsubscribe(email)

        return True, "Successfully unsubscribed from newsletter"

    async def broadcast(
        self,
        admin_id: int,
        subject: str,
        content: str,
        html_content: Optional[str] = None,
    ) -> tuple[bool, str, int]:
        """
        Send a newsletter to every active subscriber.

        Args:
            admin_id: Telegram user ID of the sender, must be an admin
            subject: Email subject
            content: Plain-text body; also rendered to HTML when html_content is empty
            html_content: Optional prebuilt HTML body

        Returns: (success, message, sent_count)
        """
        if not self.permissions.can_send_newsletter(admin_id):
            AuditLogger.log_permission_denied(admin_id, "newsletter", "-", "send newsletter")
            return False, "Only admins can send newsletters", 0

        subject = (subject or "").strip()
        content = (content or "").strip()
        if not subject or not content:
            return False, "Subject and content are required", 0

        async with self.db.session() as session:
            repo = PostgresNewsletterRepository(session)
            newsletter = await repo.create_newsletter(subject, content, html_content, admin_id)
            recipients = await repo.list_active_emails()

        if not recipients:
            return False, "No active subscribers found", 0

        sent_count = 0
        for start in range(0, len(recipients), self.batch_size):
            batch = recipients[start:start + self.batch_size]
            results = await asyncio.gather(
                *(self._send_one(email, subject, content, html_content) for email in batch),
                return_exceptions=True,
            )
            for result in results:
                if isinstance(result, Exception):
                    logger.error("newsletter_send_error", newsletter_id=newsletter.id, error=str(result))
            sent_count += sum(1 for result in results if result is True)

            if start + self.batch_size < len(recipients):
                await asyncio.sleep(self.batch_delay_seconds)

        async with self.db.session() as session:
            await PostgresNewsletterRepository(session).mark_sent(newsletter.id, sent_count)

        AuditLogger.log_newsletter_sent(admin_id, newsletter.id, sent_count, len(recipients))
        logger.info(
            "newsletter_broadcast_completed",
            newsletter_id=newsletter.id,
            sent_count=sent_count,
            total=len(recipients),
        )

        return (
            True,
            f"Newsletter sent successfully to {sent_count} out of {len(recipients)} subscribers",
            sent_count,
        )

    async def stats(self) -> NewsletterStats:
        """Subscriber counts and the most recent newsletters."""
        async with self.db.session() as session:
            repo = PostgresNewsletterRepository(session)
            return NewsletterStats(
                total_subscribers=await repo.count_subscribers(),
                active_subscribers=await repo.count_subscribers(active_only=True),
                total_newsletters=await repo.count_newsletters(),
                recent_newsletters=await repo.recent_newsletters(),
            )

    async def _send_one(
        self, email: str, subject: str, content: str, html_content: Optional[str]
    ) -> bool:
        link = unsubscribe_url(self.app_url, email)
        html_body = html_content or render_newsletter_html(content, link)
        text_body = f"{content}\n\nUnsubscribe: {link}"
        return await self.email_client.send(email, subject, html_body, text_body)

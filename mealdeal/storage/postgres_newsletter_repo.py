"""PostgreSQL repository for newsletter subscriptions and broadcasts."""

from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mealdeal.logging import get_logger
from mealdeal.models.newsletter import Newsletter, NewsletterSubscription
from mealdeal.storage.db_models import NewsletterSubscriptionTable, NewsletterTable

logger = get_logger(__name__)

RECENT_NEWSLETTER_LIMIT = 5


class PostgresNewsletterRepository:
    """Subscriptions and sent newsletters using PostgreSQL."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def get_subscription(self, email: str) -> Optional[NewsletterSubscription]:
        """Retrieve subscription by email address."""
        db_subscription = await self._get_subscription_row(email)
        return self._subscription_to_domain(db_subscription) if db_subscription else None

    async def subscribe(self, email: str) -> NewsletterSubscription:
        """Create an active subscription or reactivate an existing one."""
        db_subscription = await self._get_subscription_row(email)

        if db_subscription is None:
            db_subscription = NewsletterSubscriptionTable(email=email, is_active=True)
            self.session.add(db_subscription)
        else:
            db_subscription.is_active = True

        await self.session.flush()

        logger.info("newsletter_subscribed", subscription_id=db_subscription.id)

        return self._subscription_to_domain(db_subscription)

    async def unsubscribe(self, email: str) -> bool:
        """Deactivate a subscription. Returns False when none is active."""
        db_subscription = await self._get_subscription_row(email)

        if db_subscription is None or not db_subscription.is_active:
            return False

        db_subscription.is_active = False
        await self.session.flush()

        logger.info("newsletter_unsubscribed", subscription_id=db_subscription.id)

        return True

    async def list_active_emails(self) -> list[str]:
        """Email addresses of all active subscribers, in signup order."""
        stmt = (
            select(NewsletterSubscriptionTable.email)
            .where(NewsletterSubscriptionTable.is_active.is_(True))
            .order_by(NewsletterSubscriptionTable.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_subscribers(self, active_only: bool = False) -> int:
        stmt = select(func.count(NewsletterSubscriptionTable.id))
        if active_only:
            stmt = stmt.where(NewsletterSubscriptionTable.is_active.is_(True))
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def create_newsletter(
        self,
        subject: str,
        content: str,
        html_content: Optional[str],
        created_by: int,
    ) -> Newsletter:
        """Record a newsletter before it is sent."""
        db_newsletter = NewsletterTable(
            subject=subject,
            content=content,
            html_content=html_content,
            created_by=created_by,
            sent_count=0,
        )
        self.session.add(db_newsletter)
        await self.session.flush()

        logger.info("newsletter_created", newsletter_id=db_newsletter.id, created_by=created_by)

        return self._newsletter_to_domain(db_newsletter)

    async def mark_sent(self, newsletter_id: int, sent_count: int) -> Newsletter:
        """Stamp sent_at and the number of successful deliveries."""
        db_newsletter = await self.session.get(NewsletterTable, newsletter_id)

        if not db_newsletter:
            raise ValueError(f"Newsletter not found: {newsletter_id}")

        db_newsletter.sent_at = datetime.utcnow()
        db_newsletter.sent_count = sent_count
        await self.session.flush()

        return self._newsletter_to_domain(db_newsletter)

    async def count_newsletters(self) -> int:
        result = await self.session.execute(select(func.count(NewsletterTable.id)))
        return result.scalar_one()

    async def recent_newsletters(self, limit: int = RECENT_NEWSLETTER_LIMIT) -> list[Newsletter]:
        """Most recently created newsletters first."""
        stmt = (
            select(NewsletterTable)
            .order_by(NewsletterTable.created_at.desc(), NewsletterTable.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return [self._newsletter_to_domain(row) for row in result.scalars().all()]

    async def _get_subscription_row(self, email: str) -> Optional[NewsletterSubscriptionTable]:
        stmt = select(NewsletterSubscriptionTable).where(NewsletterSubscriptionTable.email == email)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    def _subscription_to_domain(self, row: NewsletterSubscriptionTable) -> NewsletterSubscription:
        return NewsletterSubscription(
            id=row.id,
            email=row.email,
            is_active=row.is_active,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def _newsletter_to_domain(self, row: NewsletterTable) -> Newsletter:
        return Newsletter(
            id=row.id,
            subject=row.subject,
            content=row.content,
            html_content=row.html_content,
            created_by=row.created_by,
            sent_at=row.sent_at,
            sent_count=row.sent_count,
            created_at=row.created_at,
        )

"""PostgreSQL repository for ClaimedDeal entities."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from mealdeal.logging import get_logger
from mealdeal.models.claimed_deal import BLOCKING_CLAIM_STATUSES, ClaimedDeal, ClaimStatus
from mealdeal.storage.db_models import ClaimedDealTable, OfferTable
from mealdeal.storage.postgres_offer_repo import PostgresOfferRepository
from mealdeal.storage.repository_base import RepositoryBase

logger = get_logger(__name__)


class PostgresClaimRepository(RepositoryBase[ClaimedDeal]):
    """Claimed deal repository using PostgreSQL."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session
        self._offers = PostgresOfferRepository(session)

    async def get_by_id(self, id: int) -> Optional[ClaimedDeal]:
        """Retrieve claim by ID."""
        stmt = select(ClaimedDealTable).where(ClaimedDealTable.id == id)
        result = await self.session.execute(stmt)
        db_claim = result.scalar_one_or_none()

        if not db_claim:
            return None

        return self._to_domain_model(db_claim)

    async def create(self, user_id: int, offer_id: int, redemption_code: str) -> ClaimedDeal:
        """Record a new claim in CLAIMED status."""
        db_claim = ClaimedDealTable(
            user_id=user_id,
            offer_id=offer_id,
            redemption_code=redemption_code,
            status=ClaimStatus.CLAIMED,
        )

        self.session.add(db_claim)
        await self.session.flush()

        logger.info(
            "deal_claimed",
            claim_id=db_claim.id,
            user_id=user_id,
            offer_id=offer_id,
        )

        return self._to_domain_model(db_claim)

    async def find_blocking_claim(self, user_id: int, offer_id: int) -> Optional[ClaimedDeal]:
        """Existing CLAIMED or REDEEMED claim of this offer by this user."""
        stmt = (
            select(ClaimedDealTable)
            .where(ClaimedDealTable.user_id == user_id)
            .where(ClaimedDealTable.offer_id == offer_id)
            .where(ClaimedDealTable.status.in_(BLOCKING_CLAIM_STATUSES))
            .limit(1)
        )
        result = await self.session.execute(stmt)
        db_claim = result.scalar_one_or_none()
        return self._to_domain_model(db_claim) if db_claim else None

    async def code_exists(self, redemption_code: str) -> bool:
        """Check whether a redemption code is already taken."""
        stmt = select(ClaimedDealTable.id).where(
            ClaimedDealTable.redemption_code == redemption_code
        )
        result = await self.session.execute(stmt)
        return result.first() is not None

    async def list_by_user(self, user_id: int) -> list[ClaimedDeal]:
        """A user's claims, newest first, with offer and restaurant loaded."""
        stmt = (
            select(ClaimedDealTable)
            .options(joinedload(ClaimedDealTable.offer).joinedload(OfferTable.restaurant))
            .where(ClaimedDealTable.user_id == user_id)
            .order_by(ClaimedDealTable.claimed_at.desc(), ClaimedDealTable.id.desc())
        )
        result = await self.session.execute(stmt)
        db_claims = result.scalars().unique().all()

        return [self._to_domain_model(db_claim, with_offer=True) for db_claim in db_claims]

    def _to_domain_model(self, db_claim: ClaimedDealTable, with_offer: bool = False) -> ClaimedDeal:
        """Convert database model to domain model."""
        return ClaimedDeal(
            id=db_claim.id,
            user_id=db_claim.user_id,
            offer_id=db_claim.offer_id,
            redemption_code=db_claim.redemption_code,
            status=db_claim.status,
            claimed_at=db_claim.claimed_at,
            redeemed_at=db_claim.redeemed_at,
            notes=db_claim.notes,
            offer=self._offers._to_domain_model(db_claim.offer) if with_offer else None,
        )

"""Deal claiming with unique redemption codes."""

import secrets
import string
from typing import Optional

from sqlalchemy.exc import IntegrityError

from mealdeal.logging import get_logger
from mealdeal.logging.audit import AuditLogger
from mealdeal.models.claimed_deal import REDEMPTION_CODE_LENGTH, ClaimedDeal
from mealdeal.storage.database import Database
from mealdeal.storage.postgres_claim_repo import PostgresClaimRepository
from mealdeal.storage.postgres_offer_repo import PostgresOfferRepository

logger = get_logger(__name__)

REDEMPTION_ALPHABET = string.ascii_uppercase + string.digits

# Partial unique index over CLAIMED and REDEEMED claims per user and offer
ACTIVE_CLAIM_INDEX = "ix_claimed_deals_user_offer_active"


def generate_redemption_code(length: int = REDEMPTION_CODE_LENGTH) -> str:
    """Random code drawn from A-Z and 0-9."""
    return "".join(secrets.choice(REDEMPTION_ALPHABET) for _ in range(length))


class DealClaimService:
    """Service for claiming offers."""

    def __init__(self, db: Database, max_code_attempts: int = 10):
        """Initialize claim service."""
        self.db = db
        self.max_code_attempts = max_code_attempts

    async def claim_deal(
        self, user_id: int, offer_id: int
    ) -> tuple[bool, str, Optional[ClaimedDeal]]:
        """
        Claim a live offer for a user.

        Returns: (success, message, claimed_deal)
        """
        try:
            async with self.db.session() as session:
                offer = await PostgresOfferRepository(session).get_live_by_id(offer_id)
                if offer is None:
                    return False, "Offer not found or has expired", None

                claim_repo = PostgresClaimRepository(session)

                if await claim_repo.find_blocking_claim(user_id, offer_id):
                    return False, "You have already claimed this deal", None

                code = await self._unique_code(claim_repo)
                if code is None:
                    logger.error("redemption_code_exhausted", offer_id=offer_id)
                    return False, "Could not generate a redemption code. Please try again.", None

                claim = await claim_repo.create(user_id, offer_id, code)
        except IntegrityError as e:
            # A concurrent claim by the same user won the insert
            if ACTIVE_CLAIM_INDEX not in str(e.orig):
                raise
            logger.warning("duplicate_claim_rejected", user_id=user_id, offer_id=offer_id)
            return False, "You have already claimed this deal", None

        claim = claim.model_copy(update={"offer": offer})
        AuditLogger.log_deal_claimed(user_id, claim.id, offer_id, claim.redemption_code)

        return True, "Deal claimed successfully", claim

    async def list_claims(self, user_id: int) -> list[ClaimedDeal]:
        """A user's claims, newest first."""
        async with self.db.session() as session:
            return await PostgresClaimRepository(session).list_by_user(user_id)

    async def _unique_code(self, claim_repo: PostgresClaimRepository) -> Optional[str]:
        for _ in range(self.max_code_attempts):
            code = generate_redemption_code()
            if not await claim_repo.code_exists(code):
                return code
            logger.debug("redemption_code_collision")
        return None

"""Claimed deal domain model."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from mealdeal.models.offer import Offer

REDEMPTION_CODE_LENGTH = 8


class ClaimStatus(str, Enum):
    """Claimed deal status."""

    CLAIMED = "CLAIMED"
    REDEEMED = "REDEEMED"
    EXPIRED = "EXPIRED"


# Statuses that block a second claim of the same offer
BLOCKING_CLAIM_STATUSES = (ClaimStatus.CLAIMED, ClaimStatus.REDEEMED)


class ClaimedDeal(BaseModel):
    """A user's claim on an offer, redeemable at the restaurant."""

    id: int
    user_id: int
    offer_id: int
    redemption_code: str = Field(
        min_length=REDEMPTION_CODE_LENGTH, max_length=REDEMPTION_CODE_LENGTH
    )
    status: ClaimStatus = Field(default=ClaimStatus.CLAIMED)
    claimed_at: datetime = Field(default_factory=datetime.utcnow)
    redeemed_at: Optional[datetime] = None
    notes: Optional[str] = None
    offer: Optional[Offer] = None

"""Offer validation service.

Validates new offers against business rules before they are stored:
- Restaurant exists and belongs to the poster
- Discounted price below original price
- Discount percentage in range
- Expiry in the future
"""

from datetime import datetime
from typing import Optional

from mealdeal.logging import get_logger
from mealdeal.models.offer import OfferInput
from mealdeal.models.restaurant import Restaurant

logger = get_logger(__name__)


class ValidationResult:
    """Result of offer validation."""

    def __init__(self):
        self.errors: list[str] = []

    @property
    def is_valid(self) -> bool:
        """Check if validation passed."""
        return len(self.errors) == 0

    def add_error(self, error: str) -> None:
        """Add validation error."""
        self.errors.append(error)


class OfferValidator:
    """Validates offers against business rules."""

    def validate_for_create(
        self,
        data: OfferInput,
        restaurant: Optional[Restaurant],
        owner_id: int,
        now: Optional[datetime] = None,
    ) -> ValidationResult:
        """
        Validate an offer before it is created.

        Args:
            data: Offer input
            restaurant: Restaurant the offer is posted for, None if not found
            owner_id: User posting the offer
            now: Reference time for the expiry check

        Returns:
            ValidationResult with errors if any
        """
        result = ValidationResult()
        now = now or datetime.utcnow()

        if restaurant is None:
            result.add_error("Restaurant not found")
        elif restaurant.owner_id != owner_id:
            result.add_error("You can only post offers for your own restaurants")

        if data.discounted_price >= data.original_price:
            result.add_error("Discounted price must be less than original price")

        if not 0 <= data.discount <= 100:
            result.add_error("Discount must be between 0 and 100")

        if data.expires_at <= now:
            result.add_error("Expiry must be in the future")

        if result.is_valid:
            logger.info("offer_validation_passed", restaurant_id=data.restaurant_id)
        else:
            logger.warning(
                "offer_validation_failed",
                restaurant_id=data.restaurant_id,
                errors=result.errors,
            )

        return result

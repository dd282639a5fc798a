"""Restaurant and offer management for owners."""

from typing import Any, Optional

from pydantic import ValidationError

from mealdeal.logging import get_logger
from mealdeal.logging.audit import AuditLogger
from mealdeal.models.offer import Offer, OfferInput
from mealdeal.models.restaurant import Restaurant, RestaurantInput
from mealdeal.security.permissions import PermissionChecker
from mealdeal.services.offer_validation import OfferValidator
from mealdeal.storage.database import Database
from mealdeal.storage.postgres_offer_repo import PostgresOfferRepository
from mealdeal.storage.postgres_restaurant_repo import PostgresRestaurantRepository

logger = get_logger(__name__)


class RestaurantService:
    """Create and edit restaurants."""

    def __init__(self, db: Database, permissions: PermissionChecker):
        self.db = db
        self.permissions = permissions

    async def create_restaurant(
        self, owner_id: int, data: RestaurantInput
    ) -> tuple[bool, str, Optional[Restaurant]]:
        """
        Register a restaurant owned by owner_id.

        Returns: (success, message, restaurant)
        """
        async with self.db.session() as session:
            restaurant = await PostgresRestaurantRepository(session).create(owner_id, data)

        AuditLogger.log_restaurant_saved(owner_id, restaurant.id, restaurant.name, created=True)
        return True, "Restaurant created successfully", restaurant

    async def update_restaurant(
        self, owner_id: int, restaurant_id: int, data: RestaurantInput
    ) -> tuple[bool, str, Optional[Restaurant]]:
        """
        Replace a restaurant's details; only the owner may do this.

        Returns: (success, message, restaurant)
        """
        async with self.db.session() as session:
            repo = PostgresRestaurantRepository(session)
            existing = await repo.get_by_id(restaurant_id)

            if existing is None or not self.permissions.owns_restaurant(owner_id, existing):
                if existing is not None:
                    AuditLogger.log_permission_denied(
                        owner_id, "restaurant", restaurant_id, "update restaurant"
                    )
                return False, "Restaurant not found or you don't have permission to edit it", None

            restaurant = await repo.update(restaurant_id, data)

        AuditLogger.log_restaurant_saved(owner_id, restaurant.id, restaurant.name, created=False)
        return True, "Restaurant updated successfully", restaurant

    async def list_owned(self, owner_id: int) -> list[Restaurant]:
        """Restaurants owned by a user."""
        async with self.db.session() as session:
            return await PostgresRestaurantRepository(session).list_by_owner(owner_id)


class OfferService:
    """Post offers for owned restaurants."""

    def __init__(self, db: Database, validator: Optional[OfferValidator] = None):
        self.db = db
        self.validator = validator or OfferValidator()

    async def create_offer(
        self, owner_id: int, data: OfferInput
    ) -> tuple[bool, str, Optional[Offer]]:
        """
        Validate and store a new offer.

        Returns: (success, message, offer)
        """
        async with self.db.session() as session:
            restaurant = await PostgresRestaurantRepository(session).get_by_id(data.restaurant_id)

            validation = self.validator.validate_for_create(data, restaurant, owner_id)
            if not validation.is_valid:
                if restaurant is not None and restaurant.owner_id != owner_id:
                    AuditLogger.log_permission_denied(
                        owner_id, "restaurant", data.restaurant_id, "create offer"
                    )
                return False, "; ".join(validation.errors), None

            offer = await PostgresOfferRepository(session).create(data)

        AuditLogger.log_offer_created(
            owner_id, offer.id, offer.restaurant_id, offer.title, offer.discount
        )
        return True, "Offer created successfully", offer


def build_restaurant_input(fields: dict[str, Any]) -> tuple[Optional[RestaurantInput], str]:
    """Build RestaurantInput from key=value command arguments.

    Returns: (input, error message)
    """
    payload = {
        key: value for key, value in fields.items() if key in RestaurantInput.model_fields
    }
    try:
        return RestaurantInput(**payload), ""
    except ValidationError as e:
        logger.info("restaurant_input_invalid", errors=e.error_count())
        return None, _first_error(e)


def build_offer_input(fields: dict[str, Any]) -> tuple[Optional[OfferInput], str]:
    """Build OfferInput from key=value command arguments.

    Returns: (input, error message)
    """
    payload = {
        key: value for key, value in fields.items() if key in OfferInput.model_fields
    }
    try:
        return OfferInput(**payload), ""
    except ValidationError as e:
        logger.info("offer_input_invalid", errors=e.error_count())
        return None, _first_error(e)


def _first_error(error: ValidationError) -> str:
    first = error.errors()[0]
    location = ".".join(str(part) for part in first["loc"])
    message = first["msg"].removeprefix("Value error, ")
    return f"{location}: {message}" if location else message

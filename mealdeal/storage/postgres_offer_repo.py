"""PostgreSQL repository for Offer entities."""

from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from mealdeal.logging import get_logger
from mealdeal.models.offer import Offer, OfferInput
from mealdeal.models.restaurant import RestaurantSummary
from mealdeal.storage.db_models import OfferTable, RestaurantTable
from mealdeal.storage.repository_base import RepositoryBase

logger = get_logger(__name__)


def restaurant_summary(db_restaurant: RestaurantTable) -> RestaurantSummary:
    """Public restaurant fields embedded in offers."""
    return RestaurantSummary(
        id=db_restaurant.id,
        name=db_restaurant.name,
        cuisine=db_restaurant.cuisine,
        location=db_restaurant.location,
        latitude=db_restaurant.latitude,
        longitude=db_restaurant.longitude,
        rating=db_restaurant.rating,
        image=db_restaurant.image,
    )


class PostgresOfferRepository(RepositoryBase[Offer]):
    """Offer repository using PostgreSQL.

    Offers always load with their restaurant joined; search needs the
    restaurant's name, cuisine, location, rating and coordinates.
    """

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def get_by_id(self, id: int) -> Optional[Offer]:
        """Retrieve offer by ID."""
        stmt = (
            select(OfferTable)
            .options(joinedload(OfferTable.restaurant))
            .where(OfferTable.id == id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        db_offer = result.scalar_one_or_none()

        if not db_offer:
            return None

        return self._to_domain_model(db_offer)

    async def get_live_by_id(self, id: int) -> Optional[Offer]:
        """Retrieve offer by ID only when active and unexpired."""
        offer = await self.get_by_id(id)
        if offer is None or not offer.is_live:
            return None
        return offer

    async def create(self, entity: OfferInput) -> Offer:
        """Create new offer."""
        db_offer = OfferTable(
            restaurant_id=entity.restaurant_id,
            title=entity.title,
            description=entity.description,
            original_price=entity.original_price,
            discounted_price=entity.discounted_price,
            discount=entity.discount,
            terms=entity.terms,
            expires_at=entity.expires_at,
            is_active=True,
        )

        self.session.add(db_offer)
        await self.session.flush()

        logger.info(
            "offer_created",
            offer_id=db_offer.id,
            restaurant_id=entity.restaurant_id,
            discount=entity.discount,
        )

        return await self.get_by_id(db_offer.id)

    async def list_candidates(self, active_only: bool = False) -> list[Offer]:
        """All offers in id order with their restaurants joined.

        Filtering and ordering happen in the search pipeline; active_only
        only trims the load when the caller already knows it wants live
        offers.
        """
        stmt = select(OfferTable).options(joinedload(OfferTable.restaurant))
        if active_only:
            stmt = stmt.where(OfferTable.is_active.is_(True)).where(
                OfferTable.expires_at > datetime.utcnow()
            )
        stmt = stmt.order_by(OfferTable.id)

        result = await self.session.execute(stmt)
        db_offers = result.scalars().unique().all()

        logger.debug("offer_candidates_loaded", count=len(db_offers), active_only=active_only)

        return [self._to_domain_model(db_offer) for db_offer in db_offers]

    async def list_live_by_restaurant(self, restaurant_id: int) -> list[Offer]:
        """A restaurant's active, unexpired offers, newest first."""
        stmt = (
            select(OfferTable)
            .options(joinedload(OfferTable.restaurant))
            .where(OfferTable.restaurant_id == restaurant_id)
            .where(OfferTable.is_active.is_(True))
            .where(OfferTable.expires_at > datetime.utcnow())
            .order_by(OfferTable.created_at.desc(), OfferTable.id.desc())
        )
        result = await self.session.execute(stmt)
        return [self._to_domain_model(db_offer) for db_offer in result.scalars().unique().all()]

    def _to_domain_model(self, db_offer: OfferTable) -> Offer:
        """Convert database model to domain model."""
        return Offer(
            id=db_offer.id,
            restaurant_id=db_offer.restaurant_id,
            title=db_offer.title,
            description=db_offer.description,
            original_price=db_offer.original_price,
            discounted_price=db_offer.discounted_price,
            discount=db_offer.discount,
            terms=db_offer.terms,
            expires_at=db_offer.expires_at,
            is_active=db_offer.is_active,
            restaurant=restaurant_summary(db_offer.restaurant),
            created_at=db_offer.created_at,
            updated_at=db_offer.updated_at,
        )

"""PostgreSQL repository for Restaurant entities."""

from datetime import datetime
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mealdeal.logging import get_logger
from mealdeal.models.restaurant import Restaurant, RestaurantInput
from mealdeal.storage.db_models import OfferTable, RestaurantTable
from mealdeal.storage.repository_base import RepositoryBase

logger = get_logger(__name__)


def _live_offer_count(now: datetime):
    """Correlated count of active, unexpired offers per restaurant."""
    return (
        select(func.count(OfferTable.id))
        .where(OfferTable.restaurant_id == RestaurantTable.id)
        .where(OfferTable.is_active.is_(True))
        .where(OfferTable.expires_at > now)
        .correlate(RestaurantTable)
        .scalar_subquery()
    )


class PostgresRestaurantRepository(RepositoryBase[Restaurant]):
    """Restaurant repository using PostgreSQL."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    async def get_by_id(self, id: int) -> Optional[Restaurant]:
        """Retrieve restaurant by ID."""
        stmt = select(
            RestaurantTable, _live_offer_count(datetime.utcnow()).label("live_offer_count")
        ).where(RestaurantTable.id == id)
        row = (await self.session.execute(stmt)).one_or_none()

        if not row:
            return None

        return self._to_domain_model(row[0], row[1])

    async def create(self, owner_id: int, entity: RestaurantInput) -> Restaurant:
        """Create new restaurant owned by owner_id."""
        db_restaurant = RestaurantTable(owner_id=owner_id, **entity.model_dump())

        self.session.add(db_restaurant)
        await self.session.flush()

        logger.info("restaurant_created", restaurant_id=db_restaurant.id, owner_id=owner_id)

        return self._to_domain_model(db_restaurant, 0)

    async def update(self, id: int, entity: RestaurantInput) -> Restaurant:
        """Replace the editable fields of a restaurant."""
        db_restaurant = await self.session.get(RestaurantTable, id)

        if not db_restaurant:
            raise ValueError(f"Restaurant not found: {id}")

        for field_name, value in entity.model_dump().items():
            setattr(db_restaurant, field_name, value)

        await self.session.flush()

        logger.info("restaurant_updated", restaurant_id=id)

        return await self.get_by_id(id)

    async def list_all(self) -> list[Restaurant]:
        """All restaurants in id order, with live offer counts."""
        return await self._list(None)

    async def list_by_owner(self, owner_id: int) -> list[Restaurant]:
        """Restaurants owned by one user."""
        return await self._list(owner_id)

    async def _list(self, owner_id: Optional[int]) -> list[Restaurant]:
        stmt = select(
            RestaurantTable, _live_offer_count(datetime.utcnow()).label("live_offer_count")
        )
        if owner_id is not None:
            stmt = stmt.where(RestaurantTable.owner_id == owner_id)
        stmt = stmt.order_by(RestaurantTable.id)

        rows = (await self.session.execute(stmt)).all()
        return [self._to_domain_model(db_restaurant, count) for db_restaurant, count in rows]

    def _to_domain_model(self, db_restaurant: RestaurantTable, live_offer_count: int) -> Restaurant:
        """Convert database model to domain model."""
        return Restaurant(
            id=db_restaurant.id,
            owner_id=db_restaurant.owner_id,
            name=db_restaurant.name,
            cuisine=db_restaurant.cuisine,
            description=db_restaurant.description,
            location=db_restaurant.location,
            latitude=db_restaurant.latitude,
            longitude=db_restaurant.longitude,
            phone=db_restaurant.phone,
            hours=db_restaurant.hours,
            rating=db_restaurant.rating,
            review_count=db_restaurant.review_count,
            image=db_restaurant.image,
            live_offer_count=live_offer_count or 0,
            created_at=db_restaurant.created_at,
            updated_at=db_restaurant.updated_at,
        )

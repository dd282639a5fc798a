"""Offer and restaurant search over stored listings."""

from datetime import datetime
from typing import Mapping, Optional

from mealdeal.logging import get_logger
from mealdeal.models.search import (
    DEFAULT_PAGE_SIZE,
    RestaurantDetail,
    RestaurantPage,
    ResultPage,
    SearchCriteria,
)
from mealdeal.services import result_assembler
from mealdeal.services.query_composer import build_selection_plan, parse_search_criteria
from mealdeal.services.restaurant_search import search_restaurants
from mealdeal.storage.database import Database
from mealdeal.storage.location_cache import LocationCache
from mealdeal.storage.postgres_offer_repo import PostgresOfferRepository
from mealdeal.storage.postgres_restaurant_repo import PostgresRestaurantRepository

logger = get_logger(__name__)


class OfferSearchService:
    """Loads candidates from storage and runs them through the search pipeline."""

    def __init__(
        self,
        db: Database,
        location_cache: Optional[LocationCache] = None,
        default_radius_km: float = 10.0,
        page_size: int = DEFAULT_PAGE_SIZE,
    ):
        """Initialize search service."""
        self.db = db
        self.location_cache = location_cache
        self.default_radius_km = default_radius_km
        self.page_size = page_size

    async def search_offers(
        self, criteria: SearchCriteria, now: Optional[datetime] = None
    ) -> ResultPage:
        """Run an offer search and return one page of results."""
        async with self.db.session() as session:
            candidates = await PostgresOfferRepository(session).list_candidates(
                active_only=criteria.active_only
            )
            restaurants = await PostgresRestaurantRepository(session).list_all()

        plan = build_selection_plan(criteria, now=now)
        page = result_assembler.execute(
            candidates,
            plan,
            scope=criteria.scope,
            restaurants=restaurants,
            limit=criteria.limit,
            cursor=criteria.cursor,
        )

        logger.info(
            "offer_search_completed",
            candidates=len(candidates),
            matched=page.pagination.total_count,
            returned=page.count,
            geo_scoped=criteria.scope is not None,
            sort_by=criteria.sort_by.value,
        )

        return page

    async def search_restaurants(self, criteria: SearchCriteria) -> RestaurantPage:
        """Run a restaurant search."""
        async with self.db.session() as session:
            restaurants = await PostgresRestaurantRepository(session).list_all()

        page = search_restaurants(restaurants, criteria)

        logger.info(
            "restaurant_search_completed",
            candidates=len(restaurants),
            returned=page.count,
            geo_scoped=criteria.scope is not None,
        )

        return page

    async def restaurant_detail(self, restaurant_id: int) -> Optional[RestaurantDetail]:
        """A restaurant with its live offers, or None if it doesn't exist."""
        async with self.db.session() as session:
            restaurant = await PostgresRestaurantRepository(session).get_by_id(restaurant_id)
            if restaurant is None:
                return None
            offers = await PostgresOfferRepository(session).list_live_by_restaurant(restaurant_id)

        return RestaurantDetail(restaurant=restaurant, offers=offers)

    async def criteria_for_user(self, params: Mapping[str, str], user_id: int) -> SearchCriteria:
        """Parse request parameters, falling back to the user's cached location.

        The cache is consulted only when the request names no coordinates at
        all; malformed coordinates still mean "no geographic scope".
        """
        criteria = parse_search_criteria(params, default_limit=self.page_size)

        if criteria.scope is not None or self.location_cache is None:
            return criteria
        if params.get("lat") is not None or params.get("lng") is not None:
            return criteria

        center = await self.location_cache.get(user_id)
        if center is None:
            return criteria

        resolved = dict(params)
        resolved["lat"] = str(center.latitude)
        resolved["lng"] = str(center.longitude)
        resolved.setdefault("radius", str(self.default_radius_km))

        logger.debug("search_location_from_cache", user_id=user_id)

        return parse_search_criteria(resolved, default_limit=self.page_size)

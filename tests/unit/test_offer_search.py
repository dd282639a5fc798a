"""Unit tests for the offer search service."""

from unittest.mock import AsyncMock, patch

import pytest

from mealdeal.models.geo import Coordinate
from mealdeal.models.search import SearchCriteria, SortKey
from mealdeal.services.offer_search import OfferSearchService
from mealdeal.services.query_composer import parse_search_criteria
from mealdeal.services.restaurant_search import search_restaurants


@pytest.fixture
def location_cache():
    cache = AsyncMock()
    cache.get.return_value = None
    return cache


@pytest.fixture
def repos(offers, restaurants):
    with patch("mealdeal.services.offer_search.PostgresOfferRepository") as offer_cls, \
         patch("mealdeal.services.offer_search.PostgresRestaurantRepository") as restaurant_cls:
        offer_cls.return_value.list_candidates = AsyncMock(return_value=offers)
        restaurant_cls.return_value.list_all = AsyncMock(return_value=restaurants)
        yield offer_cls.return_value, restaurant_cls.return_value


class TestCriteriaForUser:
    """Tests for falling back to a cached location."""

    @pytest.mark.asyncio
    async def test_cached_location_used_with_default_radius(self, mock_db, location_cache):
        location_cache.get.return_value = Coordinate(latitude=40.7128, longitude=-74.006)
        service = OfferSearchService(mock_db, location_cache=location_cache, default_radius_km=7.5)

        criteria = await service.criteria_for_user({"sortBy": "distance"}, 42)

        location_cache.get.assert_awaited_once_with(42)
        assert criteria.scope.center.latitude == 40.7128
        assert criteria.scope.radius_km == 7.5
        assert criteria.sort_by is SortKey.DISTANCE

    @pytest.mark.asyncio
    async def test_explicit_radius_kept(self, mock_db, location_cache):
        location_cache.get.return_value = Coordinate(latitude=40.7128, longitude=-74.006)
        service = OfferSearchService(mock_db, location_cache=location_cache)

        criteria = await service.criteria_for_user({"radius": "2"}, 42)

        assert criteria.scope.radius_km == 2.0

    @pytest.mark.asyncio
    async def test_request_coordinates_win(self, mock_db, location_cache):
        service = OfferSearchService(mock_db, location_cache=location_cache)

        criteria = await service.criteria_for_user({"lat": "1", "lng": "2", "radius": "3"}, 42)

        location_cache.get.assert_not_awaited()
        assert criteria.scope.center == Coordinate(latitude=1, longitude=2)

    @pytest.mark.asyncio
    async def test_malformed_request_coordinates_skip_cache(self, mock_db, location_cache):
        service = OfferSearchService(mock_db, location_cache=location_cache)

        criteria = await service.criteria_for_user({"lat": "x", "lng": "2", "radius": "3"}, 42)

        location_cache.get.assert_not_awaited()
        assert criteria.scope is None

    @pytest.mark.asyncio
    async def test_cache_miss(self, mock_db, location_cache):
        service = OfferSearchService(mock_db, location_cache=location_cache)

        criteria = await service.criteria_for_user({}, 42)

        assert criteria.scope is None

    @pytest.mark.asyncio
    async def test_page_size_default(self, mock_db):
        service = OfferSearchService(mock_db, page_size=4)

        criteria = await service.criteria_for_user({}, 42)

        assert criteria.limit == 4


@pytest.mark.asyncio
async def test_search_offers(mock_db, repos, now):
    offer_repo, _ = repos
    service = OfferSearchService(mock_db)
    criteria = parse_search_criteria({"cuisine": "Italian", "discount": "high", "activeOnly": "true"})

    page = await service.search_offers(criteria, now=now)

    assert [result.offer.id for result in page.offers] == [1]
    assert "Italian" in page.filters.cuisines
    offer_repo.list_candidates.assert_awaited_once_with(active_only=True)


@pytest.mark.asyncio
async def test_search_restaurants_service(mock_db, repos):
    service = OfferSearchService(mock_db)

    page = await service.search_restaurants(SearchCriteria(cuisine="japanese"))

    assert [result.restaurant.name for result in page.restaurants] == [
        "Noodle Bar Tokyo",
        "Sakura Sushi",
    ]


@pytest.mark.asyncio
async def test_restaurant_detail(mock_db, repos, restaurants, offers):
    offer_repo, restaurant_repo = repos
    own_offers = [offer for offer in offers if offer.restaurant_id == 1]
    restaurant_repo.get_by_id = AsyncMock(return_value=restaurants[0])
    offer_repo.list_live_by_restaurant = AsyncMock(return_value=own_offers)

    detail = await OfferSearchService(mock_db).restaurant_detail(1)

    assert detail.restaurant is restaurants[0]
    assert detail.offers == own_offers
    offer_repo.list_live_by_restaurant.assert_awaited_once_with(1)


@pytest.mark.asyncio
async def test_restaurant_detail_missing(mock_db, repos):
    offer_repo, restaurant_repo = repos
    restaurant_repo.get_by_id = AsyncMock(return_value=None)
    offer_repo.list_live_by_restaurant = AsyncMock()

    assert await OfferSearchService(mock_db).restaurant_detail(999) is None
    offer_repo.list_live_by_restaurant.assert_not_awaited()


class TestRestaurantSearch:
    """Tests for restaurant listing search."""

    def test_scope_keeps_unlocated(self, restaurants):
        criteria = parse_search_criteria({"lat": "40.7128", "lng": "-74.0060", "radius": "3"})

        page = search_restaurants(restaurants, criteria)

        assert {result.restaurant.name for result in page.restaurants} == {
            "Bella Vista",
            "Urban Grill",
            "Spice Route",
            "Smoky Joe's BBQ",
            "La Cantina Mexicana",
        }

    def test_distance_sort(self, restaurants):
        criteria = parse_search_criteria(
            {"lat": "40.7128", "lng": "-74.0060", "radius": "3", "sortBy": "distance"}
        )

        page = search_restaurants(restaurants, criteria)

        assert [result.restaurant.id for result in page.restaurants] == [1, 3, 4, 6, 8]

    def test_sort_by_name(self, restaurants):
        page = search_restaurants(restaurants, parse_search_criteria({"sortBy": "name"}))

        names = [result.restaurant.name for result in page.restaurants]
        assert names == sorted(names, key=str.lower)

    def test_sort_by_rating(self, restaurants):
        page = search_restaurants(restaurants, parse_search_criteria({"sortBy": "rating"}))

        assert page.restaurants[0].restaurant.name == "Bella Vista"

    def test_default_newest_first(self, restaurants):
        page = search_restaurants(restaurants, SearchCriteria())

        assert [result.restaurant.id for result in page.restaurants] == list(range(8, 0, -1))

    def test_text_search_description(self, restaurants):
        page = search_restaurants(restaurants, SearchCriteria(search="tonkotsu"))

        assert [result.restaurant.name for result in page.restaurants] == ["Noodle Bar Tokyo"]

    def test_facets_from_all_restaurants(self, restaurants):
        page = search_restaurants(restaurants, SearchCriteria(search="nothing-matches"))

        assert page.count == 0
        assert len(page.filters.cuisines) == 7

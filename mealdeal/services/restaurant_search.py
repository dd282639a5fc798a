"""Restaurant listing search with the same geo rules as offer search."""

from typing import Sequence

from mealdeal.models.restaurant import Restaurant
from mealdeal.models.search import (
    RestaurantPage,
    RestaurantResult,
    RestaurantSortKey,
    SearchCriteria,
)
from mealdeal.services.geo_distance import distance_to
from mealdeal.services.query_composer import ALL_SENTINEL
from mealdeal.services.result_assembler import collect_facets


def _matches(restaurant: Restaurant, criteria: SearchCriteria) -> bool:
    if criteria.search:
        needle = criteria.search.lower()
        fields = (
            restaurant.name,
            restaurant.cuisine,
            restaurant.location,
            restaurant.description,
        )
        if not any(value and needle in value.lower() for value in fields):
            return False

    cuisine = criteria.cuisine
    if cuisine and cuisine.lower() != ALL_SENTINEL:
        if restaurant.cuisine.lower() != cuisine.lower():
            return False

    location = criteria.location
    if location and location.lower() != ALL_SENTINEL:
        if location.lower() not in restaurant.location.lower():
            return False

    return True


def _order(
    results: list[RestaurantResult], sort_by: RestaurantSortKey, has_scope: bool
) -> list[RestaurantResult]:
    ordered = list(results)

    if sort_by is RestaurantSortKey.DISTANCE and has_scope:
        ordered.sort(
            key=lambda r: (1, 0.0, 0)
            if r.distance_km is None
            else (0, r.distance_km, r.restaurant.id)
        )
        return ordered

    ordered.sort(key=lambda r: r.restaurant.id)
    if sort_by is RestaurantSortKey.RATING:
        ordered.sort(key=lambda r: r.restaurant.rating, reverse=True)
    elif sort_by is RestaurantSortKey.NAME:
        ordered.sort(key=lambda r: r.restaurant.name.lower())
    else:
        ordered.sort(key=lambda r: r.restaurant.created_at, reverse=True)
    return ordered


def search_restaurants(
    restaurants: Sequence[Restaurant], criteria: SearchCriteria
) -> RestaurantPage:
    """Filter and order restaurants.

    Restaurants without coordinates stay in the listing when a geographic
    scope is given; located ones beyond the radius are dropped.
    """
    matched = [r for r in restaurants if _matches(r, criteria)]

    scope = criteria.scope
    has_scope = scope is not None and scope.radius_km > 0
    results = []
    for restaurant in matched:
        if not has_scope:
            results.append(RestaurantResult(restaurant=restaurant))
            continue
        distance = distance_to(restaurant, scope.center)
        if distance is None or distance <= scope.radius_km:
            results.append(RestaurantResult(restaurant=restaurant, distance_km=distance))

    return RestaurantPage(
        restaurants=_order(results, criteria.restaurant_sort_by, has_scope),
        filters=collect_facets(restaurants),
    )

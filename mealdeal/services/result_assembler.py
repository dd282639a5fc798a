"""Apply a selection plan to candidate offers and build one result page.

The assembler is a pure function of its inputs: identical candidates, plan,
scope and cursor always give the same page. Every ordering ends with the
offer id as a secondary key, which is what keeps consecutive pages disjoint.
"""

from typing import Iterable, Optional, Sequence

from mealdeal.models.offer import Offer
from mealdeal.models.restaurant import Restaurant
from mealdeal.models.search import (
    DEFAULT_PAGE_SIZE,
    FilterFacets,
    GeoScope,
    OfferResult,
    Pagination,
    ResultPage,
)
from mealdeal.services.geo_distance import distance_to
from mealdeal.services.query_composer import (
    DEFAULT_ORDER,
    DistanceOrder,
    Ordering,
    Plan,
)


def apply_scope(offers: Iterable[Offer], scope: GeoScope) -> list[OfferResult]:
    """Annotate distances and drop located offers outside the radius.

    Offers whose restaurant has no coordinate are kept, without a distance.
    """
    results = []
    for offer in offers:
        distance = distance_to(offer.restaurant, scope.center)
        if distance is None or distance <= scope.radius_km:
            results.append(OfferResult(offer=offer, distance_km=distance))
    return results


def _distance_key(result: OfferResult) -> tuple:
    if result.distance_km is None:
        return (1, 0.0, 0)
    return (0, result.distance_km, result.offer.id)


def order_results(
    results: list[OfferResult], order: Ordering, has_scope: bool
) -> list[OfferResult]:
    """Sort results into a total order.

    Distance ordering without a scope falls back to the default order.
    Unlocated offers keep their incoming relative order under distance
    ordering and always follow located ones.
    """
    ordered = list(results)

    if isinstance(order, DistanceOrder):
        if has_scope:
            ordered.sort(key=_distance_key)
            return ordered
        order = DEFAULT_ORDER

    # Two stable passes: id ascending, then the primary field
    ordered.sort(key=lambda result: result.offer.id)
    ordered.sort(
        key=lambda result: order.field.value_of(result.offer),
        reverse=order.descending,
    )
    return ordered


def decode_cursor(cursor: Optional[str]) -> int:
    """Offset encoded in a cursor; malformed cursors start from the top."""
    if not cursor:
        return 0
    try:
        offset = int(cursor)
    except ValueError:
        return 0
    return max(offset, 0)


def paginate(
    ordered: Sequence[OfferResult], limit: int, cursor: Optional[str]
) -> tuple[list[OfferResult], Pagination]:
    """Slice one page out of the ordered results."""
    limit = max(limit, 1)
    offset = decode_cursor(cursor)
    page = list(ordered[offset : offset + limit])
    has_next_page = offset + limit < len(ordered)
    pagination = Pagination(
        has_next_page=has_next_page,
        next_cursor=str(offset + limit) if has_next_page else None,
        total_count=len(ordered),
    )
    return page, pagination


def collect_facets(restaurants: Iterable[Restaurant]) -> FilterFacets:
    """Sorted distinct cuisines and locations across the given restaurants."""
    cuisines: set[str] = set()
    locations: set[str] = set()
    for restaurant in restaurants:
        if restaurant.cuisine:
            cuisines.add(restaurant.cuisine)
        if restaurant.location:
            locations.add(restaurant.location)
    return FilterFacets(cuisines=sorted(cuisines), locations=sorted(locations))


def execute(
    candidates: Iterable[Offer],
    plan: Plan,
    scope: Optional[GeoScope] = None,
    restaurants: Iterable[Restaurant] = (),
    limit: int = DEFAULT_PAGE_SIZE,
    cursor: Optional[str] = None,
) -> ResultPage:
    """Filter, geo-scope, order and page candidate offers.

    Args:
        candidates: Live offers, each carrying its restaurant summary
        plan: Predicates and ordering from the query composer
        scope: Optional centre and radius; a non-positive radius is ignored
        restaurants: Every restaurant in the system, for filter facets
        limit: Page size
        cursor: Cursor returned with the previous page

    Returns:
        ResultPage with the requested page and facet values
    """
    matched = [offer for offer in candidates if plan.matches(offer)]

    if scope is not None and scope.radius_km > 0:
        results = apply_scope(matched, scope)
        has_scope = True
    else:
        results = [OfferResult(offer=offer) for offer in matched]
        has_scope = False

    ordered = order_results(results, plan.order, has_scope=has_scope)
    page, pagination = paginate(ordered, limit, cursor)

    return ResultPage(
        offers=page,
        filters=collect_facets(restaurants),
        pagination=pagination,
    )

"""Translate search criteria into an explicit selection plan.

A ``Plan`` is a tuple of predicates (all must match) plus one ordering.
Every predicate and ordering is its own small value type, so the set of
supported filters is closed and each can be tested on its own.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError

from mealdeal.models.geo import Coordinate
from mealdeal.models.offer import Offer
from mealdeal.models.search import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    DiscountBand,
    GeoScope,
    RestaurantSortKey,
    SearchCriteria,
    SortKey,
)

ALL_SENTINEL = "all"

_TRUE_VALUES = {"true", "1", "yes", "on"}


@dataclass(frozen=True)
class TextMatch:
    """Case-insensitive substring match on any of five offer/restaurant fields."""

    term: str

    def matches(self, offer: Offer) -> bool:
        needle = self.term.lower()
        fields = (
            offer.title,
            offer.description,
            offer.restaurant.name,
            offer.restaurant.cuisine,
            offer.restaurant.location,
        )
        return any(value and needle in value.lower() for value in fields)


@dataclass(frozen=True)
class CuisineEquals:
    """Restaurant cuisine equals the value, ignoring case."""

    value: str

    def matches(self, offer: Offer) -> bool:
        return offer.restaurant.cuisine.lower() == self.value.lower()


@dataclass(frozen=True)
class LocationContains:
    """Restaurant address contains the value, ignoring case."""

    value: str

    def matches(self, offer: Offer) -> bool:
        return self.value.lower() in offer.restaurant.location.lower()


@dataclass(frozen=True)
class DiscountRange:
    """Stored discount within [minimum, maximum)."""

    minimum: Optional[int] = None
    maximum: Optional[int] = None

    def matches(self, offer: Offer) -> bool:
        if self.minimum is not None and offer.discount < self.minimum:
            return False
        if self.maximum is not None and offer.discount >= self.maximum:
            return False
        return True


@dataclass(frozen=True)
class ActiveWindow:
    """Offer is flagged active and expires after ``now``."""

    now: datetime

    def matches(self, offer: Offer) -> bool:
        return offer.is_active and offer.expires_at > self.now


@dataclass(frozen=True)
class RestaurantIs:
    """Offer belongs to one restaurant."""

    restaurant_id: int

    def matches(self, offer: Offer) -> bool:
        return offer.restaurant_id == self.restaurant_id


Predicate = Union[
    TextMatch, CuisineEquals, LocationContains, DiscountRange, ActiveWindow, RestaurantIs
]


class OrderField(str, Enum):
    """Offer fields that can drive ordering."""

    CREATED_AT = "created_at"
    DISCOUNT = "discount"
    DISCOUNTED_PRICE = "discounted_price"
    RESTAURANT_RATING = "restaurant_rating"
    EXPIRES_AT = "expires_at"

    def value_of(self, offer: Offer) -> Any:
        if self is OrderField.RESTAURANT_RATING:
            return offer.restaurant.rating
        return getattr(offer, self.value)


@dataclass(frozen=True)
class FieldOrder:
    """Order by one offer field."""

    field: OrderField
    descending: bool = False


@dataclass(frozen=True)
class DistanceOrder:
    """Closest first; needs a geographic scope to take effect."""


Ordering = Union[FieldOrder, DistanceOrder]

DEFAULT_ORDER = FieldOrder(OrderField.CREATED_AT, descending=True)

SORT_ORDERS: dict[SortKey, Ordering] = {
    SortKey.CREATED: DEFAULT_ORDER,
    SortKey.DISCOUNT: FieldOrder(OrderField.DISCOUNT, descending=True),
    SortKey.PRICE: FieldOrder(OrderField.DISCOUNTED_PRICE),
    SortKey.RATING: FieldOrder(OrderField.RESTAURANT_RATING, descending=True),
    SortKey.EXPIRY: FieldOrder(OrderField.EXPIRES_AT),
    SortKey.DISTANCE: DistanceOrder(),
}

DISCOUNT_RANGES: dict[DiscountBand, Optional[DiscountRange]] = {
    DiscountBand.ALL: None,
    DiscountBand.HIGH: DiscountRange(minimum=40),
    DiscountBand.MEDIUM: DiscountRange(minimum=25, maximum=40),
    DiscountBand.LOW: DiscountRange(maximum=25),
}


@dataclass(frozen=True)
class Plan:
    """Resolved predicates and ordering for one offer search."""

    predicates: tuple[Predicate, ...] = ()
    order: Ordering = DEFAULT_ORDER

    def matches(self, offer: Offer) -> bool:
        return all(predicate.matches(offer) for predicate in self.predicates)


def _is_set(value: Optional[str]) -> bool:
    return bool(value) and value.lower() != ALL_SENTINEL


def build_selection_plan(
    criteria: SearchCriteria, now: Optional[datetime] = None
) -> Plan:
    """Build the plan for criteria. Pure; ``now`` pins the active window."""
    predicates: list[Predicate] = []

    if criteria.restaurant_id is not None:
        predicates.append(RestaurantIs(criteria.restaurant_id))

    if criteria.active_only:
        predicates.append(ActiveWindow(now or datetime.utcnow()))

    if criteria.search:
        predicates.append(TextMatch(criteria.search))

    if _is_set(criteria.cuisine):
        predicates.append(CuisineEquals(criteria.cuisine))

    if _is_set(criteria.location):
        predicates.append(LocationContains(criteria.location))

    discount_range = DISCOUNT_RANGES[criteria.discount]
    if discount_range is not None:
        predicates.append(discount_range)

    return Plan(predicates=tuple(predicates), order=SORT_ORDERS[criteria.sort_by])


def _parse_float(raw: Optional[str]) -> Optional[float]:
    if raw is None:
        return None
    try:
        value = float(raw)
    except (TypeError, ValueError):
        return None
    return value if math.isfinite(value) else None


def _parse_int(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        return None


def _parse_enum(enum_cls, raw: Optional[str], default):
    if not raw:
        return default
    try:
        return enum_cls(raw.strip().lower())
    except ValueError:
        return default


def _parse_scope(
    lat: Optional[str], lng: Optional[str], radius: Optional[str]
) -> Optional[GeoScope]:
    latitude = _parse_float(lat)
    longitude = _parse_float(lng)
    radius_km = _parse_float(radius)
    if latitude is None or longitude is None or radius_km is None or radius_km <= 0:
        return None
    try:
        center = Coordinate(latitude=latitude, longitude=longitude)
    except ValidationError:
        return None
    return GeoScope(center=center, radius_km=radius_km)


def _clean_text(raw: Optional[str]) -> Optional[str]:
    if raw is None:
        return None
    text = raw.strip()
    return text or None


def parse_search_criteria(
    params: Mapping[str, str], default_limit: int = DEFAULT_PAGE_SIZE
) -> SearchCriteria:
    """Build criteria from request parameters.

    Malformed values never raise; they are treated as absent.
    """
    limit = _parse_int(params.get("limit"))
    if limit is None:
        limit = default_limit
    limit = max(1, min(limit, MAX_PAGE_SIZE))

    restaurant_id = _parse_int(params.get("restaurantId"))
    if restaurant_id is not None and restaurant_id <= 0:
        restaurant_id = None

    active_raw = params.get("activeOnly")

    return SearchCriteria(
        search=_clean_text(params.get("search")),
        cuisine=_clean_text(params.get("cuisine")),
        location=_clean_text(params.get("location")),
        discount=_parse_enum(DiscountBand, params.get("discount"), DiscountBand.ALL),
        sort_by=_parse_enum(SortKey, params.get("sortBy"), SortKey.CREATED),
        restaurant_sort_by=_parse_enum(
            RestaurantSortKey, params.get("sortBy"), RestaurantSortKey.CREATED
        ),
        scope=_parse_scope(params.get("lat"), params.get("lng"), params.get("radius")),
        active_only=bool(active_raw) and active_raw.strip().lower() in _TRUE_VALUES,
        restaurant_id=restaurant_id,
        limit=limit,
        cursor=_clean_text(params.get("cursor")),
    )

"""Search request and result models.

``SearchCriteria`` is the request-scoped input to offer and restaurant
search; ``ResultPage`` is what the search core hands back. Neither is
persisted.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from mealdeal.models.geo import Coordinate
from mealdeal.models.offer import Offer
from mealdeal.models.restaurant import Restaurant

DEFAULT_PAGE_SIZE = 12
MAX_PAGE_SIZE = 50


class DiscountBand(str, Enum):
    """Discount percentage bands."""

    ALL = "all"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class SortKey(str, Enum):
    """Offer sort options."""

    CREATED = "created"
    DISCOUNT = "discount"
    PRICE = "price"
    RATING = "rating"
    EXPIRY = "expiry"
    DISTANCE = "distance"


class RestaurantSortKey(str, Enum):
    """Restaurant sort options."""

    CREATED = "created"
    RATING = "rating"
    NAME = "name"
    DISTANCE = "distance"


class GeoScope(BaseModel):
    """Search centre plus radius in kilometres."""

    model_config = ConfigDict(frozen=True)

    center: Coordinate
    radius_km: float = Field(gt=0)


class SearchCriteria(BaseModel):
    """All recognized filter and sort inputs for one search."""

    search: Optional[str] = None
    cuisine: Optional[str] = None
    location: Optional[str] = None
    discount: DiscountBand = DiscountBand.ALL
    sort_by: SortKey = SortKey.CREATED
    restaurant_sort_by: RestaurantSortKey = RestaurantSortKey.CREATED
    scope: Optional[GeoScope] = None
    active_only: bool = False
    restaurant_id: Optional[int] = None
    limit: int = Field(default=DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    cursor: Optional[str] = None


class OfferResult(BaseModel):
    """An offer in a result page, with its distance when a scope was given."""

    offer: Offer
    distance_km: Optional[float] = None

    def to_dict(self) -> dict[str, Any]:
        data = self.offer.to_dict()
        data["distance"] = self.distance_km
        return data


class RestaurantResult(BaseModel):
    """A restaurant in a result page."""

    restaurant: Restaurant
    distance_km: Optional[float] = None


class FilterFacets(BaseModel):
    """Distinct values available for further filtering."""

    cuisines: list[str] = Field(default_factory=list)
    locations: list[str] = Field(default_factory=list)


class Pagination(BaseModel):
    """Cursor state for the next page."""

    has_next_page: bool = False
    next_cursor: Optional[str] = None
    total_count: int = 0


class ResultPage(BaseModel):
    """One page of ordered offers plus facet metadata."""

    offers: list[OfferResult] = Field(default_factory=list)
    filters: FilterFacets = Field(default_factory=FilterFacets)
    pagination: Pagination = Field(default_factory=Pagination)

    @property
    def count(self) -> int:
        return len(self.offers)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the listing response shape."""
        return {
            "offers": [result.to_dict() for result in self.offers],
            "filters": {
                "cuisines": list(self.filters.cuisines),
                "locations": list(self.filters.locations),
            },
            "count": self.count,
            "pagination": {
                "hasNextPage": self.pagination.has_next_page,
                "nextCursor": self.pagination.next_cursor,
                "totalCount": self.pagination.total_count,
            },
        }


class RestaurantPage(BaseModel):
    """Restaurant search results plus facet metadata."""

    restaurants: list[RestaurantResult] = Field(default_factory=list)
    filters: FilterFacets = Field(default_factory=FilterFacets)

    @property
    def count(self) -> int:
        return len(self.restaurants)


class RestaurantDetail(BaseModel):
    """One restaurant with its live offers."""

    restaurant: Restaurant
    offers: list[Offer] = Field(default_factory=list)

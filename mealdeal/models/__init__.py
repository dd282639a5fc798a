"""Models package - Pydantic domain models."""

from .claimed_deal import ClaimedDeal, ClaimStatus
from .geo import Coordinate, Located
from .newsletter import Newsletter, NewsletterStats, NewsletterSubscription
from .offer import Offer, OfferInput
from .reservation import Reservation, ReservationInput, ReservationStatus
from .restaurant import Restaurant, RestaurantInput, RestaurantSummary
from .search import (
    DiscountBand,
    FilterFacets,
    GeoScope,
    OfferResult,
    Pagination,
    RestaurantDetail,
    RestaurantPage,
    RestaurantResult,
    RestaurantSortKey,
    ResultPage,
    SearchCriteria,
    SortKey,
)
from .user import User, UserInput

__all__ = [
    "ClaimedDeal",
    "ClaimStatus",
    "Coordinate",
    "Located",
    "Newsletter",
    "NewsletterStats",
    "NewsletterSubscription",
    "Offer",
    "OfferInput",
    "Reservation",
    "ReservationInput",
    "ReservationStatus",
    "Restaurant",
    "RestaurantInput",
    "RestaurantSummary",
    "DiscountBand",
    "FilterFacets",
    "GeoScope",
    "OfferResult",
    "Pagination",
    "RestaurantDetail",
    "RestaurantPage",
    "RestaurantResult",
    "RestaurantSortKey",
    "ResultPage",
    "SearchCriteria",
    "SortKey",
    "User",
    "UserInput",
]

"""Offer domain models."""

from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator

from mealdeal.models.restaurant import RestaurantSummary


def to_naive_utc(value: datetime) -> datetime:
    """Aware datetimes become naive UTC; naive ones are taken as UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class Offer(BaseModel):
    """Offer entity, joined with its owning restaurant's public fields."""

    id: int
    restaurant_id: int
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    original_price: Decimal = Field(gt=0, decimal_places=2)
    discounted_price: Decimal = Field(ge=0, decimal_places=2)
    discount: int = Field(ge=0, le=100, description="Stored percentage, authoritative for filtering")
    terms: Optional[str] = None
    expires_at: datetime
    is_active: bool = True
    restaurant: RestaurantSummary
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def is_expired(self) -> bool:
        """Check if offer has expired based on expires_at."""
        return datetime.utcnow() >= self.expires_at

    @property
    def is_live(self) -> bool:
        """Active and not yet expired."""
        return self.is_active and not self.is_expired

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON shape used by listing responses."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "originalPrice": float(self.original_price),
            "discountedPrice": float(self.discounted_price),
            "discount": self.discount,
            "terms": self.terms,
            "expiresAt": self.expires_at.isoformat(),
            "isActive": self.is_active,
            "restaurantId": self.restaurant_id,
            "restaurant": {
                "id": self.restaurant.id,
                "name": self.restaurant.name,
                "cuisine": self.restaurant.cuisine,
                "location": self.restaurant.location,
                "latitude": self.restaurant.latitude,
                "longitude": self.restaurant.longitude,
                "rating": self.restaurant.rating,
                "image": self.restaurant.image,
            },
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


class OfferInput(BaseModel):
    """Input model for offer creation."""

    restaurant_id: int = Field(gt=0)
    title: str = Field(min_length=1, max_length=200)
    description: Optional[str] = None
    original_price: Decimal = Field(gt=0, decimal_places=2)
    discounted_price: Decimal = Field(ge=0, decimal_places=2)
    discount: int = Field(ge=0, le=100)
    terms: Optional[str] = None
    expires_at: datetime

    @field_validator("discounted_price")
    @classmethod
    def validate_price_order(cls, v: Decimal, info) -> Decimal:
        """Ensure discounted_price < original_price."""
        values = info.data
        if "original_price" in values and v >= values["original_price"]:
            raise ValueError("Discounted price must be less than original price")
        return v

    @field_validator("expires_at")
    @classmethod
    def normalize_expiry(cls, v: datetime) -> datetime:
        """Store expiry as naive UTC, matching the database columns."""
        return to_naive_utc(v)

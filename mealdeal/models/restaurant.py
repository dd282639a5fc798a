"""Restaurant domain models."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from mealdeal.models.geo import Coordinate, coordinate_from


class RestaurantSummary(BaseModel):
    """Public restaurant fields embedded in offer listings."""

    id: int
    name: str
    cuisine: str
    location: str
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    rating: float = 0.0
    image: Optional[str] = None

    @property
    def coordinate(self) -> Optional[Coordinate]:
        return coordinate_from(self.latitude, self.longitude)


class Restaurant(BaseModel):
    """Restaurant entity."""

    id: int
    owner_id: int = Field(description="User ID of the restaurant owner")
    name: str = Field(min_length=1, max_length=200)
    cuisine: str = Field(min_length=1, max_length=100)
    description: Optional[str] = None
    location: str = Field(min_length=1, max_length=300, description="Free-text address")
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    phone: Optional[str] = Field(default=None, max_length=30)
    hours: Optional[str] = Field(default=None, max_length=200)
    rating: float = Field(default=0.0, ge=0, le=5)
    review_count: int = Field(default=0, ge=0)
    image: Optional[str] = Field(default=None, max_length=500)
    live_offer_count: int = Field(default=0, ge=0, description="Active, unexpired offers")
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def coordinate(self) -> Optional[Coordinate]:
        return coordinate_from(self.latitude, self.longitude)

    def summary(self) -> RestaurantSummary:
        """Public fields used when embedding into offers."""
        return RestaurantSummary(
            id=self.id,
            name=self.name,
            cuisine=self.cuisine,
            location=self.location,
            latitude=self.latitude,
            longitude=self.longitude,
            rating=self.rating,
            image=self.image,
        )


class RestaurantInput(BaseModel):
    """Input model for restaurant creation and updates."""

    name: str = Field(min_length=1, max_length=200)
    cuisine: str = Field(min_length=1, max_length=100)
    location: str = Field(min_length=1, max_length=300)
    description: Optional[str] = None
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    phone: Optional[str] = Field(default=None, max_length=30)
    hours: Optional[str] = Field(default=None, max_length=200)
    image: Optional[str] = Field(default=None, max_length=500)

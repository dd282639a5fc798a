"""Table reservation domain model."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from mealdeal.models.offer import to_naive_utc

MIN_PARTY_SIZE = 1
MAX_PARTY_SIZE = 20


class ReservationStatus(str, Enum):
    """Reservation status enumeration."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"


class Reservation(BaseModel):
    """A table booking at a restaurant."""

    id: int
    user_id: int
    restaurant_id: int
    restaurant_name: Optional[str] = None
    date: datetime = Field(description="Reservation date")
    time: str = Field(min_length=1, max_length=10, description="Time slot, e.g. 19:30")
    party_size: int = Field(ge=MIN_PARTY_SIZE, le=MAX_PARTY_SIZE)
    special_requests: Optional[str] = None
    phone_number: Optional[str] = Field(default=None, max_length=30)
    email: Optional[str] = Field(default=None, max_length=320)
    status: ReservationStatus = Field(default=ReservationStatus.PENDING)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)


class ReservationInput(BaseModel):
    """Input model for reservation creation."""

    restaurant_id: int = Field(gt=0)
    date: datetime
    time: str = Field(min_length=1, max_length=10)
    party_size: int
    special_requests: Optional[str] = None
    phone_number: Optional[str] = None
    email: Optional[str] = None

    @field_validator("date")
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        return to_naive_utc(v)

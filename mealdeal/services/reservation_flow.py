"""Table reservation flow."""

from datetime import datetime
from typing import Optional

from mealdeal.logging import get_logger
from mealdeal.logging.audit import AuditLogger
from mealdeal.models.reservation import (
    MAX_PARTY_SIZE,
    MIN_PARTY_SIZE,
    Reservation,
    ReservationInput,
    ReservationStatus,
)
from mealdeal.storage.database import Database
from mealdeal.storage.postgres_reservation_repo import PostgresReservationRepository
from mealdeal.storage.postgres_restaurant_repo import PostgresRestaurantRepository

logger = get_logger(__name__)


def parse_status(raw: str) -> Optional[ReservationStatus]:
    """Case-insensitive status lookup; None for unknown values."""
    try:
        return ReservationStatus(raw.strip().upper())
    except ValueError:
        return None


class ReservationService:
    """Service for booking tables and tracking their status."""

    def __init__(self, db: Database):
        """Initialize reservation service."""
        self.db = db

    async def create_reservation(
        self,
        user_id: int,
        data: ReservationInput,
        now: Optional[datetime] = None,
    ) -> tuple[bool, str, Optional[Reservation]]:
        """
        Book a table. New reservations start as PENDING.

        Returns: (success, message, reservation)
        """
        if not MIN_PARTY_SIZE <= data.party_size <= MAX_PARTY_SIZE:
            return (
                False,
                f"Party size must be between {MIN_PARTY_SIZE} and {MAX_PARTY_SIZE}",
                None,
            )

        if data.date <= (now or datetime.utcnow()):
            return False, "Reservation date must be in the future", None

        async with self.db.session() as session:
            restaurant = await PostgresRestaurantRepository(session).get_by_id(data.restaurant_id)
            if restaurant is None:
                return False, "Restaurant not found", None

            reservation = await PostgresReservationRepository(session).create(user_id, data)

        AuditLogger.log_reservation(
            user_id,
            reservation.id,
            reservation.restaurant_id,
            reservation.status.value,
            created=True,
        )
        return True, "Reservation created successfully", reservation

    async def list_reservations(
        self,
        user_id: int,
        restaurant_id: Optional[int] = None,
        status: Optional[ReservationStatus] = None,
    ) -> list[Reservation]:
        """A user's reservations, latest date first."""
        async with self.db.session() as session:
            return await PostgresReservationRepository(session).list_by_user(
                user_id, restaurant_id=restaurant_id, status=status
            )

    async def update_status(
        self, user_id: int, reservation_id: int, status: str
    ) -> tuple[bool, str, Optional[Reservation]]:
        """
        Change the status of one of the user's reservations.

        Returns: (success, message, reservation)
        """
        new_status = parse_status(status)
        if new_status is None:
            return False, "Invalid status", None

        async with self.db.session() as session:
            repo = PostgresReservationRepository(session)
            existing = await repo.get_for_user(reservation_id, user_id)
            if existing is None:
                return False, "Reservation not found", None

            reservation = await repo.update_status(reservation_id, new_status)

        AuditLogger.log_reservation(
            user_id,
            reservation.id,
            reservation.restaurant_id,
            new_status.value,
            created=False,
        )
        return True, "Reservation updated successfully", reservation

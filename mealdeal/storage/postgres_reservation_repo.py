"""PostgreSQL repository for Reservation entities."""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from mealdeal.logging import get_logger
from mealdeal.models.reservation import Reservation, ReservationInput, ReservationStatus
from mealdeal.storage.db_models import ReservationTable
from mealdeal.storage.repository_base import RepositoryBase

logger = get_logger(__name__)


class PostgresReservationRepository(RepositoryBase[Reservation]):
    """Reservation repository using PostgreSQL."""

    def __init__(self, session: AsyncSession):
        """Initialize repository with database session."""
        self.session = session

    def _select(self):
        return (
            select(ReservationTable)
            .options(joinedload(ReservationTable.restaurant))
            .execution_options(populate_existing=True)
        )

    async def get_by_id(self, id: int) -> Optional[Reservation]:
        """Retrieve reservation by ID."""
        stmt = self._select().where(ReservationTable.id == id)
        result = await self.session.execute(stmt)
        db_reservation = result.scalar_one_or_none()

        if not db_reservation:
            return None

        return self._to_domain_model(db_reservation)

    async def get_for_user(self, id: int, user_id: int) -> Optional[Reservation]:
        """Retrieve a reservation only if it belongs to user_id."""
        stmt = (
            self._select()
            .where(ReservationTable.id == id)
            .where(ReservationTable.user_id == user_id)
        )
        result = await self.session.execute(stmt)
        db_reservation = result.scalar_one_or_none()
        return self._to_domain_model(db_reservation) if db_reservation else None

    async def create(self, user_id: int, entity: ReservationInput) -> Reservation:
        """Create a PENDING reservation."""
        db_reservation = ReservationTable(
            user_id=user_id,
            restaurant_id=entity.restaurant_id,
            date=entity.date,
            time=entity.time,
            party_size=entity.party_size,
            special_requests=entity.special_requests,
            phone_number=entity.phone_number,
            email=entity.email,
            status=ReservationStatus.PENDING,
        )

        self.session.add(db_reservation)
        await self.session.flush()

        logger.info(
            "reservation_created",
            reservation_id=db_reservation.id,
            restaurant_id=entity.restaurant_id,
            user_id=user_id,
            party_size=entity.party_size,
        )

        return await self.get_by_id(db_reservation.id)

    async def list_by_user(
        self,
        user_id: int,
        restaurant_id: Optional[int] = None,
        status: Optional[ReservationStatus] = None,
    ) -> list[Reservation]:
        """A user's reservations, latest date first."""
        stmt = self._select().where(ReservationTable.user_id == user_id)
        if restaurant_id is not None:
            stmt = stmt.where(ReservationTable.restaurant_id == restaurant_id)
        if status is not None:
            stmt = stmt.where(ReservationTable.status == status)
        stmt = stmt.order_by(ReservationTable.date.desc(), ReservationTable.id.desc())

        result = await self.session.execute(stmt)
        db_reservations = result.scalars().unique().all()

        return [self._to_domain_model(db_reservation) for db_reservation in db_reservations]

    async def update_status(self, id: int, status: ReservationStatus) -> Reservation:
        """Update reservation status."""
        db_reservation = await self.session.get(ReservationTable, id)

        if not db_reservation:
            raise ValueError(f"Reservation not found: {id}")

        db_reservation.status = status
        await self.session.flush()

        logger.info("reservation_status_updated", reservation_id=id, status=status.value)

        return await self.get_by_id(id)

    def _to_domain_model(self, db_reservation: ReservationTable) -> Reservation:
        """Convert database model to domain model."""
        return Reservation(
            id=db_reservation.id,
            user_id=db_reservation.user_id,
            restaurant_id=db_reservation.restaurant_id,
            restaurant_name=db_reservation.restaurant.name if db_reservation.restaurant else None,
            date=db_reservation.date,
            time=db_reservation.time,
            party_size=db_reservation.party_size,
            special_requests=db_reservation.special_requests,
            phone_number=db_reservation.phone_number,
            email=db_reservation.email,
            status=db_reservation.status,
            created_at=db_reservation.created_at,
            updated_at=db_reservation.updated_at,
        )

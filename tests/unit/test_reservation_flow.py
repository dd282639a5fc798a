"""Unit tests for the table reservation flow."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest

from mealdeal.models.reservation import Reservation, ReservationInput, ReservationStatus
from mealdeal.services.reservation_flow import ReservationService, parse_status


def reservation_input(now, **overrides):
    data = {
        "restaurant_id": 1,
        "date": now + timedelta(days=2),
        "time": "19:30",
        "party_size": 4,
    }
    data.update(overrides)
    return ReservationInput(**data)


def stored(user_id, data, status=ReservationStatus.PENDING):
    return Reservation(
        id=10,
        user_id=user_id,
        restaurant_id=data.restaurant_id,
        restaurant_name="Bella Vista",
        date=data.date,
        time=data.time,
        party_size=data.party_size,
        status=status,
    )


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("confirmed", ReservationStatus.CONFIRMED),
        (" Cancelled ", ReservationStatus.CANCELLED),
        ("PENDING", ReservationStatus.PENDING),
        ("eaten", None),
    ],
)
def test_parse_status(raw, expected):
    assert parse_status(raw) is expected


@pytest.fixture
def repos():
    with patch("mealdeal.services.reservation_flow.PostgresRestaurantRepository") as restaurant_cls, \
         patch("mealdeal.services.reservation_flow.PostgresReservationRepository") as reservation_cls:
        yield restaurant_cls.return_value, reservation_cls.return_value


@pytest.mark.asyncio
async def test_create_reservation(mock_db, restaurants, now, repos):
    restaurant_repo, reservation_repo = repos
    restaurant_repo.get_by_id = AsyncMock(return_value=restaurants[0])
    reservation_repo.create = AsyncMock(side_effect=stored)
    data = reservation_input(now)

    success, message, reservation = await ReservationService(mock_db).create_reservation(
        3, data, now=now
    )

    assert success is True
    assert message == "Reservation created successfully"
    assert reservation.status is ReservationStatus.PENDING
    reservation_repo.create.assert_awaited_once_with(3, data)


@pytest.mark.asyncio
@pytest.mark.parametrize("party_size", [0, 21])
async def test_party_size_bounds(mock_db, now, repos, party_size):
    _, reservation_repo = repos
    reservation_repo.create = AsyncMock()

    success, message, _ = await ReservationService(mock_db).create_reservation(
        3, reservation_input(now, party_size=party_size), now=now
    )

    assert success is False
    assert message == "Party size must be between 1 and 20"
    reservation_repo.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_date_must_be_future(mock_db, now, repos):
    success, message, _ = await ReservationService(mock_db).create_reservation(
        3, reservation_input(now, date=now - timedelta(hours=1)), now=now
    )

    assert success is False
    assert message == "Reservation date must be in the future"


@pytest.mark.asyncio
async def test_unknown_restaurant(mock_db, now, repos):
    restaurant_repo, reservation_repo = repos
    restaurant_repo.get_by_id = AsyncMock(return_value=None)
    reservation_repo.create = AsyncMock()

    success, message, _ = await ReservationService(mock_db).create_reservation(
        3, reservation_input(now, restaurant_id=99), now=now
    )

    assert success is False
    assert message == "Restaurant not found"
    reservation_repo.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_update_status(mock_db, now, repos):
    _, reservation_repo = repos
    data = reservation_input(now)
    reservation_repo.get_for_user = AsyncMock(return_value=stored(3, data))
    reservation_repo.update_status = AsyncMock(
        return_value=stored(3, data, status=ReservationStatus.CANCELLED)
    )

    success, message, reservation = await ReservationService(mock_db).update_status(
        3, 10, "cancelled"
    )

    assert success is True
    assert message == "Reservation updated successfully"
    assert reservation.status is ReservationStatus.CANCELLED
    reservation_repo.get_for_user.assert_awaited_once_with(10, 3)
    reservation_repo.update_status.assert_awaited_once_with(10, ReservationStatus.CANCELLED)


@pytest.mark.asyncio
async def test_update_status_invalid(mock_db, repos):
    success, message, _ = await ReservationService(mock_db).update_status(3, 10, "eaten")

    assert success is False
    assert message == "Invalid status"


@pytest.mark.asyncio
async def test_update_status_other_users_reservation(mock_db, repos):
    _, reservation_repo = repos
    reservation_repo.get_for_user = AsyncMock(return_value=None)
    reservation_repo.update_status = AsyncMock()

    success, message, _ = await ReservationService(mock_db).update_status(4, 10, "CONFIRMED")

    assert success is False
    assert message == "Reservation not found"
    reservation_repo.update_status.assert_not_awaited()


@pytest.mark.asyncio
async def test_list_reservations_filters(mock_db, repos):
    _, reservation_repo = repos
    reservation_repo.list_by_user = AsyncMock(return_value=[])

    await ReservationService(mock_db).list_reservations(
        3, restaurant_id=1, status=ReservationStatus.PENDING
    )

    reservation_repo.list_by_user.assert_awaited_once_with(
        3, restaurant_id=1, status=ReservationStatus.PENDING
    )


def test_reservation_rejects_large_party():
    with pytest.raises(ValueError):
        Reservation(
            id=1,
            user_id=1,
            restaurant_id=1,
            date=datetime(2026, 2, 1, 19, 0),
            time="19:00",
            party_size=25,
        )


def test_reservation_input_aware_date_stored_as_utc():
    data = ReservationInput(
        restaurant_id=1,
        date=datetime(2026, 2, 1, 19, 0, tzinfo=timezone(timedelta(hours=-5))),
        time="19:00",
        party_size=2,
    )

    assert data.date == datetime(2026, 2, 2, 0, 0)
    assert data.date.tzinfo is None

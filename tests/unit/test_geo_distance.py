"""Unit tests for great-circle distance helpers."""

from typing import Optional

import pytest

from mealdeal.models.geo import Coordinate, coordinate_from
from mealdeal.services.geo_distance import (
    calculate_distance,
    distance_to,
    filter_by_radius,
    format_distance,
    sort_by_distance,
)

NEW_YORK = Coordinate(latitude=40.7128, longitude=-74.0060)
LOS_ANGELES = Coordinate(latitude=34.0522, longitude=-118.2437)


class Place:
    """Minimal located entity."""

    def __init__(self, name: str, latitude: Optional[float] = None, longitude: Optional[float] = None):
        self.name = name
        self.latitude = latitude
        self.longitude = longitude

    @property
    def coordinate(self) -> Optional[Coordinate]:
        return coordinate_from(self.latitude, self.longitude)


class TestCalculateDistance:
    """Tests for the Haversine distance."""

    @pytest.mark.parametrize(
        "coordinate",
        [
            NEW_YORK,
            Coordinate(latitude=0.0, longitude=0.0),
            Coordinate(latitude=90.0, longitude=180.0),
            Coordinate(latitude=-33.8688, longitude=151.2093),
        ],
    )
    def test_same_point_is_zero(self, coordinate):
        assert calculate_distance(coordinate, coordinate) == 0.0

    def test_symmetric(self):
        assert calculate_distance(NEW_YORK, LOS_ANGELES) == calculate_distance(LOS_ANGELES, NEW_YORK)

    def test_new_york_to_los_angeles(self):
        """Roughly 3936 km between the two cities."""
        distance = calculate_distance(NEW_YORK, LOS_ANGELES)
        assert 3900 < distance < 3970

    def test_one_degree_of_latitude(self):
        distance = calculate_distance(
            Coordinate(latitude=0.0, longitude=0.0),
            Coordinate(latitude=1.0, longitude=0.0),
        )
        assert distance == pytest.approx(111.19, abs=0.01)

    def test_rounded_to_two_places(self):
        distance = calculate_distance(NEW_YORK, Coordinate(latitude=40.7336, longitude=-74.0086))
        assert distance == round(distance, 2)

    def test_antipodal_points(self):
        distance = calculate_distance(
            Coordinate(latitude=0.0, longitude=0.0),
            Coordinate(latitude=0.0, longitude=180.0),
        )
        assert distance == pytest.approx(20015.09, abs=0.01)


def test_distance_to_unlocated_is_none():
    assert distance_to(Place("nowhere"), NEW_YORK) is None


def test_distance_to_zero_coordinate_is_located():
    """0.0 is a real coordinate, not a missing one."""
    assert distance_to(Place("null island", 0.0, 0.0), Coordinate(latitude=0.0, longitude=0.0)) == 0.0


class TestFilterByRadius:
    """Tests for strict radius filtering."""

    def test_keeps_only_located_within_radius(self):
        near = Place("near", 40.7336, -74.0086)
        far = Place("far", 34.0505, -118.2400)
        unlocated = Place("unlocated")

        result = filter_by_radius([near, far, unlocated], NEW_YORK, 5.0)

        assert result == [near]

    def test_never_returns_unlocated_even_for_huge_radius(self):
        places = [Place("a"), Place("b", 40.7336, -74.0086), Place("c")]

        result = filter_by_radius(places, NEW_YORK, 1_000_000.0)

        assert [p.name for p in result] == ["b"]

    def test_radius_boundary_is_inclusive(self):
        place = Place("edge", 40.7336, -74.0086)
        exact = calculate_distance(NEW_YORK, place.coordinate)

        assert filter_by_radius([place], NEW_YORK, exact) == [place]


class TestSortByDistance:
    """Tests for distance sorting with unlocated entities last."""

    def test_unlocated_trail_located(self):
        a = Place("A")
        b = Place("B", 40.7549, -73.9840)
        c = Place("C")
        d = Place("D", 40.7336, -74.0086)

        result = sort_by_distance([a, b, c, d], NEW_YORK)

        assert [entity.name for entity, _ in result] == ["D", "B", "A", "C"]
        assert result[2][1] is None
        assert result[3][1] is None

    def test_annotates_distances(self):
        d = Place("D", 40.7336, -74.0086)

        [(entity, distance)] = sort_by_distance([d], NEW_YORK)

        assert entity is d
        assert distance == calculate_distance(NEW_YORK, d.coordinate)

    def test_stable_for_equal_distances(self):
        first = Place("first", 40.7336, -74.0086)
        second = Place("second", 40.7336, -74.0086)

        result = sort_by_distance([first, second], NEW_YORK)

        assert [entity.name for entity, _ in result] == ["first", "second"]

    def test_empty_input(self):
        assert sort_by_distance([], NEW_YORK) == []


@pytest.mark.parametrize(
    "distance,expected",
    [
        (0.25, "250m"),
        (0.0, "0m"),
        (1.0, "1km"),
        (2.5, "2.5km"),
        (12.34, "12.34km"),
    ],
)
def test_format_distance(distance, expected):
    assert format_distance(distance) == expected

"""Great-circle distance helpers for located restaurants and offers."""

import math
from typing import Iterable, Optional, Sequence, TypeVar

from mealdeal.models.geo import Coordinate, Located

# Earth's radius in kilometers
EARTH_RADIUS_KM = 6371.0

L = TypeVar("L", bound=Located)


def calculate_distance(a: Coordinate, b: Coordinate) -> float:
    """Calculate distance between two coordinates using the Haversine formula.

    Returns distance in kilometers, rounded to 2 decimal places.
    """
    lat1_rad = math.radians(a.latitude)
    lat2_rad = math.radians(b.latitude)
    dlat = math.radians(b.latitude - a.latitude)
    dlon = math.radians(b.longitude - a.longitude)

    h = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))

    return round(EARTH_RADIUS_KM * c, 2)


def distance_to(entity: Located, center: Coordinate) -> Optional[float]:
    """Distance from center to entity, or None when the entity is unlocated."""
    coordinate = entity.coordinate
    if coordinate is None:
        return None
    return calculate_distance(center, coordinate)


def filter_by_radius(
    entities: Iterable[L], center: Coordinate, radius_km: float
) -> list[L]:
    """Keep entities that have a coordinate within radius_km of center.

    Unlocated entities are always dropped, however large the radius.
    """
    results = []
    for entity in entities:
        distance = distance_to(entity, center)
        if distance is not None and distance <= radius_km:
            results.append(entity)
    return results


def sort_by_distance(
    entities: Sequence[L], center: Coordinate
) -> list[tuple[L, Optional[float]]]:
    """Annotate entities with their distance and sort closest first.

    Unlocated entities get no distance and always come after located ones.
    The sort is stable, so input order is kept among equal distances and
    among unlocated entities.
    """
    annotated = [(entity, distance_to(entity, center)) for entity in entities]
    annotated.sort(key=lambda pair: (pair[1] is None, pair[1] or 0.0))
    return annotated


def format_distance(distance_km: float) -> str:
    """Render a distance for display: metres below 1 km, else kilometres."""
    if distance_km < 1:
        return f"{round(distance_km * 1000)}m"
    return f"{distance_km:.2f}".rstrip("0").rstrip(".") + "km"

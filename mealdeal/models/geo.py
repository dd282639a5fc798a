"""Geographic value types."""

from typing import Optional, Protocol

from pydantic import BaseModel, ConfigDict, Field


class Coordinate(BaseModel):
    """A point in decimal degrees."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)


class Located(Protocol):
    """Anything that may carry a coordinate."""

    @property
    def coordinate(self) -> Optional[Coordinate]: ...


def coordinate_from(
    latitude: Optional[float], longitude: Optional[float]
) -> Optional[Coordinate]:
    """Build a coordinate when both parts are present, else None."""
    if latitude is None or longitude is None:
        return None
    return Coordinate(latitude=float(latitude), longitude=float(longitude))

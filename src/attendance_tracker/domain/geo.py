"""Geographic value objects."""

from dataclasses import dataclass


@dataclass(frozen=True)
class GeoPoint:
    """Latitude/longitude pair in degrees."""

    latitude: float
    longitude: float

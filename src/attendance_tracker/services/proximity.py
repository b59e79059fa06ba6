"""Great-circle distance checks for check-in locations."""

import math

from attendance_tracker.domain.geo import GeoPoint

EARTH_RADIUS_KM = 6371.0


def distance_km(point_a: GeoPoint, point_b: GeoPoint) -> float:
    """Return the haversine distance between two points in kilometers."""
    lat1 = math.radians(point_a.latitude)
    lat2 = math.radians(point_b.latitude)
    delta_lat = math.radians(point_b.latitude - point_a.latitude)
    delta_lon = math.radians(point_b.longitude - point_a.longitude)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(delta_lon / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def within_range(point_a: GeoPoint, point_b: GeoPoint, max_km: float) -> bool:
    """Return true when the two points are at most ``max_km`` apart."""
    return distance_km(point_a, point_b) <= max_km

# backend/inkmatch/services/search/geo.py
"""Reference coordinates and great-circle distance helpers."""
from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Literal, Optional

from inkmatch.core.exceptions import ValidationException

DistanceUnit = Literal["mi", "km"]

EARTH_RADIUS: dict[str, float] = {
    "mi": 3958.8,
    "km": 6371.0,
}

DEGREES_TO_RADIANS = math.pi / 180.0


@dataclass(frozen=True)
class GeoPoint:
    """A WGS84 coordinate in decimal degrees."""

    latitude: float
    longitude: float

    def __post_init__(self) -> None:
        if not -90.0 <= self.latitude <= 90.0:
            raise ValidationException(
                "Latitude must be between -90 and 90",
                details={"field": "lat", "value": self.latitude},
            )
        if not -180.0 <= self.longitude <= 180.0:
            raise ValidationException(
                "Longitude must be between -180 and 180",
                details={"field": "lng", "value": self.longitude},
            )


def earth_radius(unit: DistanceUnit) -> float:
    try:
        return EARTH_RADIUS[unit]
    except KeyError:
        raise ValueError(f"Unsupported distance unit: {unit!r}") from None


def haversine_distance(a: GeoPoint, b: GeoPoint, unit: DistanceUnit = "mi") -> float:
    """Great-circle distance between two points."""
    lat1 = a.latitude * DEGREES_TO_RADIANS
    lat2 = b.latitude * DEGREES_TO_RADIANS
    half_dlat = (b.latitude - a.latitude) * DEGREES_TO_RADIANS / 2.0
    half_dlng = (b.longitude - a.longitude) * DEGREES_TO_RADIANS / 2.0
    h = math.sin(half_dlat) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(half_dlng) ** 2
    return 2.0 * earth_radius(unit) * math.asin(math.sqrt(min(1.0, h)))


def latitude_delta(distance: float, unit: DistanceUnit) -> float:
    """Degrees of latitude spanned by ``distance``; used as a cheap pre-filter."""
    return distance / (earth_radius(unit) * DEGREES_TO_RADIANS)


def reference_point(lat: Optional[float], lng: Optional[float]) -> Optional[GeoPoint]:
    """
    Build the search reference coordinate from optional query parameters.

    Both or neither must be supplied.
    """
    if lat is None and lng is None:
        return None
    if lat is None or lng is None:
        raise ValidationException(
            "Both 'lat' and 'lng' must be provided together",
            details={"fields": ["lat", "lng"]},
        )
    return GeoPoint(latitude=lat, longitude=lng)

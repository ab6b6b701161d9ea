from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Mapping, Optional

from ..core.constants import (
    DEFAULT_CAMPUS_LATITUDE,
    DEFAULT_CAMPUS_LONGITUDE,
    DEFAULT_CAMPUS_RADIUS_KM,
    EARTH_RADIUS_KM,
    MAX_ADDRESS_LENGTH,
)
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float

    def __post_init__(self):
        if not (math.isfinite(self.latitude) and math.isfinite(self.longitude)):
            raise ValidationError("Coordinates must be finite numbers")


@dataclass(frozen=True)
class Location:
    """A submitted coordinate plus the optional human-readable address."""

    coordinate: Coordinate
    address: Optional[str] = None

    @property
    def latitude(self) -> float:
        return self.coordinate.latitude

    @property
    def longitude(self) -> float:
        return self.coordinate.longitude

    def display_address(self) -> str:
        if self.address:
            return self.address
        return f"{self.latitude:.5f}, {self.longitude:.5f}"


# A latitude or longitude of exactly 0 counts as "not supplied".
ZERO_COORDINATE_IS_MISSING = True


def _number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        f = float(value)
    elif isinstance(value, str):
        try:
            f = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if not math.isfinite(f):
        return None
    if ZERO_COORDINATE_IS_MISSING and f == 0:
        return None
    return f


def parse_location(payload: Any) -> Optional[Location]:
    """Location from a request body ``{latitude, longitude, address?}``; None when unusable."""
    if not isinstance(payload, Mapping):
        return None
    lat = _number(payload.get("latitude"))
    lon = _number(payload.get("longitude"))
    if lat is None or lon is None:
        return None
    address = payload.get("address")
    address = str(address).strip()[:MAX_ADDRESS_LENGTH] if address else None
    return Location(coordinate=Coordinate(lat, lon), address=address or None)


def haversine_km(a: Coordinate, b: Coordinate) -> float:
    """Great-circle distance in kilometres."""
    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    d_lat = lat2 - lat1
    d_lon = math.radians(b.longitude - a.longitude)

    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lon / 2) ** 2
    # rounding can push h slightly past 1 for antipodal points
    h = min(1.0, max(0.0, h))
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def is_within_campus(point: Optional[Coordinate], center: Coordinate, radius_km: float) -> bool:
    if point is None:
        return False
    return haversine_km(point, center) <= radius_km


@dataclass(frozen=True)
class GeoFence:
    center: Coordinate = Coordinate(DEFAULT_CAMPUS_LATITUDE, DEFAULT_CAMPUS_LONGITUDE)
    radius_km: float = DEFAULT_CAMPUS_RADIUS_KM

    def __post_init__(self):
        if not math.isfinite(self.radius_km) or self.radius_km < 0:
            raise ValidationError("Campus radius must be a non-negative number")

    def distance_km(self, point: Coordinate) -> float:
        return haversine_km(point, self.center)

    def contains(self, point: Optional[Coordinate]) -> bool:
        return is_within_campus(point, self.center, self.radius_km)

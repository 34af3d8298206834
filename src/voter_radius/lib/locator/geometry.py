"""Flat-earth bounding boxes and great-circle distances in miles."""

import math
from dataclasses import dataclass

MILES_PER_DEGREE = 69.0
METERS_PER_MILE = 1609.34
# Sphere radius used by MySQL ST_Distance_Sphere / PostGIS ST_DistanceSphere
EARTH_RADIUS_METERS = 6_370_986.0
EARTH_RADIUS_MILES = EARTH_RADIUS_METERS / METERS_PER_MILE

# Keeps the longitude span finite at the poles
COS_LATITUDE_FLOOR = 1e-6


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned latitude/longitude rectangle (degrees)."""

    lat_min: float
    lon_min: float
    lat_max: float
    lon_max: float

    def contains(self, latitude: float, longitude: float) -> bool:
        return self.lat_min <= latitude <= self.lat_max and self.lon_min <= longitude <= self.lon_max

    @classmethod
    def parse(cls, raw: str) -> "BoundingBox":
        """Parse ``latMin,lonMin,latMax,lonMax``.

        Raises:
            ValueError: If the string does not hold four numbers or the box is inverted.
        """
        parts = [p.strip() for p in raw.split(",")]
        if len(parts) != 4:
            msg = f"Bounding box must be latMin,lonMin,latMax,lonMax, got {raw!r}"
            raise ValueError(msg)
        lat_min, lon_min, lat_max, lon_max = (float(p) for p in parts)
        if lat_min > lat_max or lon_min > lon_max:
            msg = f"Bounding box minimums exceed maximums: {raw!r}"
            raise ValueError(msg)
        return cls(lat_min=lat_min, lon_min=lon_min, lat_max=lat_max, lon_max=lon_max)


def bounding_box(latitude: float, longitude: float, radius_miles: float) -> BoundingBox:
    """Rectangle enclosing every point within ``radius_miles`` of the origin.

    Uses ``radius / 69`` degrees of latitude and the same span divided by
    ``cos(latitude)`` (floored at ``COS_LATITUDE_FLOOR``) for longitude.
    """
    lat_delta = radius_miles / MILES_PER_DEGREE
    lon_delta = radius_miles / (max(math.cos(math.radians(latitude)), COS_LATITUDE_FLOOR) * MILES_PER_DEGREE)
    return BoundingBox(
        lat_min=latitude - lat_delta,
        lon_min=longitude - lon_delta,
        lat_max=latitude + lat_delta,
        lon_max=longitude + lon_delta,
    )


def haversine_miles(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points, in miles."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)

    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    a = min(a, 1.0)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_MILES * c

from __future__ import annotations

import math
from typing import Iterable

from engine.types import GeoPoint

EARTH_RADIUS_M = 6_371_000.0
METERS_PER_DEGREE_LAT = 111_320.0

_MAX_REFINE = 8


def distance(a: GeoPoint, b: GeoPoint) -> float:
    """Great-circle (haversine) distance in metres."""
    lat1, lng1 = math.radians(a.lat), math.radians(a.lng)
    lat2, lng2 = math.radians(b.lat), math.radians(b.lng)

    dlat = lat2 - lat1
    dlng = lng2 - lng1

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    # clamp: rounding can push h a hair over 1.0 for antipodal points
    return 2 * EARTH_RADIUS_M * math.asin(math.sqrt(min(1.0, h)))


def is_within_boundary(point: GeoPoint, center: GeoPoint, radius_m: float) -> bool:
    return distance(point, center) <= radius_m


def _meters_per_degree_lng(center: GeoPoint) -> float:
    return METERS_PER_DEGREE_LAT * math.cos(math.radians(center.lat))


def offset_point(center: GeoPoint, north_m: float, east_m: float) -> GeoPoint:
    """Shift `center` by a metric offset using the small-angle conversion."""
    return GeoPoint(
        lat=center.lat + north_m / METERS_PER_DEGREE_LAT,
        lng=center.lng + east_m / _meters_per_degree_lng(center),
    )


def constrain_to_boundary(point: GeoPoint, center: GeoPoint, radius_m: float) -> GeoPoint:
    """
    Pull `point` back onto the boundary circle if it lies outside.

    The projection keeps the bearing from `center` to `point`, measured in a
    local metric frame (longitude scaled by cos(center latitude)), and places
    the result `radius_m` metres from the center along that bearing.
    Points already inside the circle are returned as-is.

    For large radii the small-angle step can overshoot the haversine circle;
    the projected distance is then scaled back until the result is inside,
    so the output always satisfies `is_within_boundary`.
    """
    if point == center or is_within_boundary(point, center, radius_m):
        return point

    north_m = (point.lat - center.lat) * METERS_PER_DEGREE_LAT
    east_m = (point.lng - center.lng) * _meters_per_degree_lng(center)
    bearing = math.atan2(east_m, north_m)

    reach = radius_m
    for _ in range(_MAX_REFINE):
        projected = offset_point(
            center,
            north_m=reach * math.cos(bearing),
            east_m=reach * math.sin(bearing),
        )
        d = distance(projected, center)
        if d <= radius_m:
            return projected
        reach *= (radius_m / d) * (1 - 1e-9)

    # unreachable in practice; the center is always inside
    return center


def path_length(points: Iterable[GeoPoint]) -> float:
    """Total distance along consecutive points, in metres."""
    total = 0.0
    prev = None
    for p in points:
        if prev is not None:
            total += distance(prev, p)
        prev = p
    return total


__all__ = [
    "EARTH_RADIUS_M",
    "METERS_PER_DEGREE_LAT",
    "distance",
    "is_within_boundary",
    "offset_point",
    "constrain_to_boundary",
    "path_length",
]

"""
Great-circle helpers over `Coordinates`.

Everything here is pure and assumes validated input; range checks happen when
coordinates are parsed (`Coordinates.from_dict`, API schemas).
"""

from __future__ import annotations

from dataclasses import dataclass
from math import asin, atan2, cos, degrees, radians, sin, sqrt
from typing import Sequence

from trainbuilder.schemas.core import Coordinates


EARTH_RADIUS_KM = 6371.0

# Resolution of the sampled nearest-point search. Accuracy is bounded by
# segment_length / NEAREST_POINT_SAMPLES (about 1% of the segment).
NEAREST_POINT_SAMPLES = 100


@dataclass(frozen=True)
class NearestPoint:
    point: Coordinates
    distance_km: float


@dataclass(frozen=True)
class BoundingBox:
    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def overlaps(self, other: "BoundingBox") -> bool:
        return not (
            self.max_lat < other.min_lat
            or self.min_lat > other.max_lat
            or self.max_lon < other.min_lon
            or self.min_lon > other.max_lon
        )

    def to_dict(self) -> dict[str, float]:
        return {
            "minLat": self.min_lat,
            "maxLat": self.max_lat,
            "minLon": self.min_lon,
            "maxLon": self.max_lon,
        }


def distance_km(a: Coordinates, b: Coordinates) -> float:
    """Haversine distance in kilometers."""
    lat1 = radians(a.lat)
    lat2 = radians(b.lat)
    dlat = lat2 - lat1
    dlon = radians(b.lon - a.lon)

    h = sin(dlat / 2) ** 2 + cos(lat1) * cos(lat2) * sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * atan2(sqrt(h), sqrt(1 - h))


def route_length_km(points: Sequence[Coordinates]) -> float:
    if len(points) < 2:
        return 0.0
    return sum(distance_km(points[i], points[i + 1]) for i in range(len(points) - 1))


def bearing_deg(a: Coordinates, b: Coordinates) -> float:
    """Initial compass bearing from `a` to `b`, in [0, 360)."""
    lat1 = radians(a.lat)
    lat2 = radians(b.lat)
    dlon = radians(b.lon - a.lon)

    y = sin(dlon) * cos(lat2)
    x = cos(lat1) * sin(lat2) - sin(lat1) * cos(lat2) * cos(dlon)
    return (degrees(atan2(y, x)) + 360.0) % 360.0


def intermediate_point(a: Coordinates, b: Coordinates, fraction: float) -> Coordinates:
    """
    Point at `fraction` of the way from `a` to `b` along the great circle.

    The slerp weights divide by sin(d); coincident endpoints have d == 0 and
    return `a` directly.
    """

    if fraction <= 0.0:
        return a
    if fraction >= 1.0:
        return b

    lat1, lon1 = radians(a.lat), radians(a.lon)
    lat2, lon2 = radians(b.lat), radians(b.lon)

    d = 2 * asin(
        sqrt(sin((lat1 - lat2) / 2) ** 2 + cos(lat1) * cos(lat2) * sin((lon1 - lon2) / 2) ** 2)
    )
    if d == 0.0:
        return a

    wa = sin((1 - fraction) * d) / sin(d)
    wb = sin(fraction * d) / sin(d)

    x = wa * cos(lat1) * cos(lon1) + wb * cos(lat2) * cos(lon2)
    y = wa * cos(lat1) * sin(lon1) + wb * cos(lat2) * sin(lon2)
    z = wa * sin(lat1) + wb * sin(lat2)

    return Coordinates(lat=degrees(atan2(z, sqrt(x * x + y * y))), lon=degrees(atan2(y, x)))


def nearest_point_on_segment(
    point: Coordinates,
    start: Coordinates,
    end: Coordinates,
    *,
    samples: int = NEAREST_POINT_SAMPLES,
) -> NearestPoint:
    """
    Approximate the closest point of the great-circle segment to `point`.

    The segment is sampled at `samples + 1` evenly spaced fractions (both ends
    included) and the closest sample wins; this is not an exact projection.
    """

    best = NearestPoint(point=start, distance_km=distance_km(point, start))
    for i in range(1, samples + 1):
        candidate = intermediate_point(start, end, i / samples)
        d = distance_km(point, candidate)
        if d < best.distance_km:
            best = NearestPoint(point=candidate, distance_km=d)
    return best


def bounding_box(points: Sequence[Coordinates]) -> BoundingBox:
    if not points:
        return BoundingBox(min_lat=0.0, max_lat=0.0, min_lon=0.0, max_lon=0.0)
    lats = [p.lat for p in points]
    lons = [p.lon for p in points]
    return BoundingBox(min_lat=min(lats), max_lat=max(lats), min_lon=min(lons), max_lon=max(lons))


def _orientation(p: Coordinates, q: Coordinates, r: Coordinates) -> int:
    # Sign of the cross product (q - p) x (r - p) in the (lon, lat) plane.
    value = (q.lon - p.lon) * (r.lat - p.lat) - (q.lat - p.lat) * (r.lon - p.lon)
    if abs(value) < 1e-12:
        return 0
    return 1 if value > 0 else -1


def _on_segment(p: Coordinates, q: Coordinates, r: Coordinates) -> bool:
    # `q` is collinear with p-r; check it lies within their extent.
    return (
        min(p.lon, r.lon) <= q.lon <= max(p.lon, r.lon)
        and min(p.lat, r.lat) <= q.lat <= max(p.lat, r.lat)
    )


def segments_intersect(
    a1: Coordinates,
    a2: Coordinates,
    b1: Coordinates,
    b2: Coordinates,
) -> bool:
    """
    Whether segment a1-a2 crosses or touches segment b1-b2.

    Disjoint bounding boxes always answer False. Otherwise the segments are
    tested exactly as straight lines in the lon/lat plane, which is accurate
    for the short spans drawn on a regional map.
    """

    if not bounding_box([a1, a2]).overlaps(bounding_box([b1, b2])):
        return False

    o1 = _orientation(a1, a2, b1)
    o2 = _orientation(a1, a2, b2)
    o3 = _orientation(b1, b2, a1)
    o4 = _orientation(b1, b2, a2)

    if o1 != o2 and o3 != o4:
        return True

    if o1 == 0 and _on_segment(a1, b1, a2):
        return True
    if o2 == 0 and _on_segment(a1, b2, a2):
        return True
    if o3 == 0 and _on_segment(b1, a1, b2):
        return True
    if o4 == 0 and _on_segment(b1, a2, b2):
        return True
    return False

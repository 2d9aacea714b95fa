# refillr/utils/geo.py
"""Service-area checks: great-circle radius or polygon containment"""
import math
from typing import Iterable, List, NamedTuple, Optional, Tuple
from ..models.base import GeoPoint

# Mean earth radius in meters
EARTH_RADIUS_METERS = 6371008.8

# Tolerance for treating a point as lying on a polygon edge
_EDGE_EPSILON = 1e-12

Pair = Tuple[float, float]

class ServiceAreaCheck(NamedTuple):
    inside: bool
    method: str  # "polygon" or "radius"
    distance_meters: Optional[float] = None
    radius_meters: Optional[float] = None

def _as_pair(point) -> Pair:
    if isinstance(point, GeoPoint):
        return (point.longitude, point.latitude)
    longitude, latitude = point
    return (float(longitude), float(latitude))

def haversine_meters(a, b) -> float:
    """Great-circle distance between two points in meters"""
    lon1, lat1 = _as_pair(a)
    lon2, lat2 = _as_pair(b)

    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    h = (math.sin(delta_lat / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) *
         math.sin(delta_lon / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))

    return EARTH_RADIUS_METERS * c

def normalize_ring(polygon: Optional[Iterable]) -> Optional[List[Pair]]:
    """Return the ring without its closing vertex, or None if it cannot bound an area"""
    if not polygon:
        return None
    try:
        ring = [_as_pair(p) for p in polygon]
    except (TypeError, ValueError):
        return None
    if len(ring) > 1 and ring[0] == ring[-1]:
        ring = ring[:-1]
    if len(set(ring)) < 3:
        return None
    return ring

def _on_segment(p: Pair, a: Pair, b: Pair) -> bool:
    (px, py), (ax, ay), (bx, by) = p, a, b
    cross = (px - ax) * (by - ay) - (py - ay) * (bx - ax)
    if abs(cross) > _EDGE_EPSILON:
        return False
    return (min(ax, bx) - _EDGE_EPSILON <= px <= max(ax, bx) + _EDGE_EPSILON and
            min(ay, by) - _EDGE_EPSILON <= py <= max(ay, by) + _EDGE_EPSILON)

def point_in_polygon(point, ring: List[Pair]) -> bool:
    """Ray-casting containment; points on an edge or vertex count as inside"""
    p = _as_pair(point)
    x, y = p
    inside = False
    count = len(ring)
    for i in range(count):
        a = ring[i]
        b = ring[(i + 1) % count]
        if _on_segment(p, a, b):
            return True
        (ax, ay), (bx, by) = a, b
        if (ay > y) != (by > y):
            x_cross = ax + (y - ay) * (bx - ax) / (by - ay)
            if x < x_cross:
                inside = not inside
    return inside

def check_service_area(merchant, point) -> ServiceAreaCheck:
    """Decide whether a merchant delivers to a point and how it was decided"""
    ring = normalize_ring(merchant.delivery_polygon)
    if ring is not None:
        return ServiceAreaCheck(inside=point_in_polygon(point, ring), method="polygon")

    distance = haversine_meters(merchant.location, point)
    radius = float(merchant.delivery_radius_meters)
    return ServiceAreaCheck(
        inside=distance <= radius,
        method="radius",
        distance_meters=distance,
        radius_meters=radius,
    )

def is_within_service_area(merchant, point) -> bool:
    return check_service_area(merchant, point).inside

def format_distance(a, b) -> str:
    """Human-readable distance, e.g. '450m' or '1.2km'"""
    km = haversine_meters(a, b) / 1000
    if km < 1:
        return f"{round(km * 1000)}m"
    return f"{km:.1f}km"

# looproute/services/geodesy.py
import math
from typing import List, Sequence

from looproute.models.routing import GeoPoint

EARTH_RADIUS_KM = 6_371.0


def distance_km(a: GeoPoint, b: GeoPoint) -> float:
    """
    Compute great-circle distance between two points (lat/lng in degrees), in kilometres.
    """
    lat1 = math.radians(a.lat)
    lat2 = math.radians(b.lat)
    dlat = lat2 - lat1
    dlng = math.radians(b.lng - a.lng)

    h = (
        math.sin(dlat / 2) ** 2
        + math.cos(lat1) * math.cos(lat2) * math.sin(dlng / 2) ** 2
    )
    # Rounding can push h a hair above 1 for antipodal points
    h = min(1.0, h)
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def distance_m(a: GeoPoint, b: GeoPoint) -> float:
    return distance_km(a, b) * 1000.0


def bearing_deg(origin: GeoPoint, target: GeoPoint) -> float:
    """
    Initial compass bearing from origin to target in [0, 360), 0 = north.

    Coincident points have no bearing; 0 is returned for them.
    """
    if origin.lat == target.lat and origin.lng == target.lng:
        return 0.0

    phi1 = math.radians(origin.lat)
    phi2 = math.radians(target.lat)
    dlng = math.radians(target.lng - origin.lng)

    x = math.sin(dlng) * math.cos(phi2)
    y = (math.cos(phi1) * math.sin(phi2) -
         math.sin(phi1) * math.cos(phi2) * math.cos(dlng))

    return (math.degrees(math.atan2(x, y)) + 360.0) % 360.0


def angle_difference_deg(from_bearing: float, to_bearing: float) -> float:
    """
    Signed turn from one bearing to another, normalised to (-180, 180].

    Positive means turning right (clockwise).
    """
    diff = (to_bearing - from_bearing) % 360.0
    if diff > 180.0:
        diff -= 360.0
    return diff


def cumulative_distances_m(points: Sequence[GeoPoint]) -> List[float]:
    """
    Along-route distance from the first point to every point, in metres.
    """
    totals: List[float] = []
    running = 0.0
    for i, point in enumerate(points):
        if i > 0:
            running += distance_m(points[i - 1], point)
        totals.append(running)
    return totals

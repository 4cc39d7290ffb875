# looproute/services/fallback.py
import math
from typing import List, Optional

from looproute.core.config import GenerationConfig, settings
from looproute.core.logger import logger
from looproute.models.routing import GeoPoint, RouteOption, RoutePoint
from looproute.services.geodesy import EARTH_RADIUS_KM


def generate_fallback_routes(
    center: GeoPoint,
    distance_km: float,
    count: int,
    config: Optional[GenerationConfig] = None,
) -> List[RouteOption]:
    """
    Build `count` geometric loops that start and end exactly at `center`.

    Each variant:
    - scales the distance by 0.95, 1.00 or 1.05 (cycling) and uses it as circumference
    - places the circle so that `center` lies on it, rotated by 360°/max(count, 3)
    - perturbs the radius with a low-order sine so it is not a perfect circle

    Latitudes are clamped at the poles and longitudes wrapped across the
    antimeridian, so every point is a valid coordinate.

    Needs no network access; this is the path that always succeeds.
    """
    config = config or settings.GENERATION
    segments = max(3, config.fallback_segments)
    routes: List[RouteOption] = []

    for i in range(count):
        adjusted_km = distance_km * (0.95 + 0.05 * (i % 3))

        radius_km = adjusted_km / (2 * math.pi)
        lat_radius_deg = math.degrees(radius_km / EARTH_RADIUS_KM)
        lng_radius_deg = lat_radius_deg / math.cos(math.radians(center.lat))

        direction = i * 2 * math.pi / max(count, 3)
        circle_lat = center.lat - math.sin(direction) * lat_radius_deg
        circle_lng = center.lng - math.cos(direction) * lng_radius_deg

        points: List[RoutePoint] = []
        for j in range(segments + 1):
            angle = (j / segments) * 2 * math.pi + direction
            wobble = 0.92 + 0.16 * math.sin(3 * angle + i)
            points.append(
                _valid_point(
                    circle_lat + math.sin(angle) * lat_radius_deg * wobble,
                    circle_lng + math.cos(angle) * lng_radius_deg * wobble,
                )
            )

        # Anchor both ends on the caller's position
        anchor = RoutePoint(lat=center.lat, lng=center.lng)
        points[0] = anchor
        points[-1] = anchor

        routes.append(
            RouteOption(
                id=f"fallback-{i + 1}",
                name="Recommended course" if i == 0 else f"Course {i + 1}",
                points=points,
                estimated_distance_km=adjusted_km,
                estimated_uphill_gain_m=0.0,
                total_time_s=adjusted_km * config.fallback_minutes_per_km * 60.0,
                ascend=0.0,
                descend=0.0,
                method="fallback",
            )
        )

    logger.info(
        f"Generated {len(routes)} fallback loop(s) around "
        f"({center.lat:.6f}, {center.lng:.6f}) for {distance_km:.2f} km"
    )
    return routes


def _valid_point(lat: float, lng: float) -> RoutePoint:
    lat = max(-90.0, min(90.0, lat))
    lng = ((lng + 180.0) % 360.0) - 180.0
    return RoutePoint(lat=lat, lng=lng)

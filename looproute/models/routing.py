# looproute/models/routing.py

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from looproute.core.config import settings


class GeoPoint(BaseModel):
    """
    WGS84 latitude/longitude in degrees.
    """
    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)


class RoutePoint(GeoPoint):
    """
    A point of a route polyline. Elevation is only known for engine routes.
    """
    elevation: Optional[float] = None


class Route(BaseModel):
    """
    An ordered polyline with its summary figures.

    Closed loops have points[0] == points[-1]. A route always carries at least
    two points; anything shorter is rejected at validation time.
    """
    points: List[RoutePoint] = Field(..., min_length=2)
    estimated_distance_km: float
    estimated_uphill_gain_m: float = 0.0


GenerationMethod = Literal["engine", "fallback"]


class RouteOption(Route):
    """
    One candidate loop returned by a generation request.

    `method` tells whether the loop came from the routing engine or from the
    geometric fallback.
    """
    id: str
    name: str
    total_time_s: float
    ascend: float = 0.0
    descend: float = 0.0
    method: GenerationMethod = "engine"


class LoopRouteRequest(BaseModel):
    """
    Request body for POST /routes/loop.
    """
    center: GeoPoint
    distance_km: float = Field(..., gt=0, le=settings.GENERATION.max_distance_km)
    count: int = Field(default_factory=lambda: settings.DEFAULT_ROUTE_COUNT, ge=1, le=10)


class LoopRouteResponse(BaseModel):
    routes: List[RouteOption]

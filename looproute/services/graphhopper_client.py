# looproute/services/graphhopper_client.py
import asyncio
from typing import List, Optional, Union

import httpx
from pydantic import BaseModel

from looproute.core.config import settings
from looproute.core.logger import logger
from looproute.models.routing import GeoPoint, RoutePoint
from looproute.services.polyline import decode_polyline


class GraphHopperPoints(BaseModel):
    # [lng, lat] or [lng, lat, elevation]
    coordinates: List[List[float]]


class GraphHopperPath(BaseModel):
    """
    One entry of the `paths` array of a GraphHopper /route response.
    """
    distance: float  # metres
    time: float  # milliseconds
    ascend: float = 0.0
    descend: float = 0.0
    points: Union[GraphHopperPoints, str]
    points_encoded: bool = False

    def route_points(self) -> List[RoutePoint]:
        if self.points_encoded or isinstance(self.points, str):
            if not isinstance(self.points, str):
                raise ValueError("points_encoded is set but points is not a polyline")
            return decode_polyline(self.points, include_elevation=True)

        points: List[RoutePoint] = []
        for coord in self.points.coordinates:
            if len(coord) < 2:
                raise ValueError(f"Coordinate with {len(coord)} values")
            elevation = coord[2] if len(coord) > 2 else None
            points.append(RoutePoint(lat=coord[1], lng=coord[0], elevation=elevation))
        return points


class GraphHopperResponse(BaseModel):
    paths: List[GraphHopperPath] = []


class EngineRoute(BaseModel):
    """
    A usable engine path together with its decoded geometry.
    """
    path: GraphHopperPath
    points: List[RoutePoint]


class GraphHopperClient:
    """
    Thin client for GraphHopper's round_trip algorithm.

    A single request never raises: any failure (transport error, timeout,
    non-2xx status, malformed body, no usable path) is logged and reported as
    None, so a batch of attempts can proceed independently.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout_s: Optional[float] = None,
        locale: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (settings.GRAPHHOPPER_URL if base_url is None else base_url).rstrip("/")
        self.api_key = settings.GRAPHHOPPER_API_KEY if api_key is None else api_key
        self.timeout_s = settings.GRAPHHOPPER_TIMEOUT_S if timeout_s is None else timeout_s
        self.locale = locale or settings.GRAPHHOPPER_LOCALE
        self.transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url)

    def http_client(self) -> httpx.AsyncClient:
        """
        Create an AsyncClient shared by one batch of attempts.
        """
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout_s,
            transport=self.transport,
        )

    def build_params(self, center: GeoPoint, distance_m: float, seed: int) -> dict:
        params = {
            "point": f"{center.lat},{center.lng}",
            "profile": "foot",
            "algorithm": "round_trip",
            "round_trip.distance": str(round(distance_m)),
            "round_trip.seed": str(seed),
            "elevation": "true",
            "points_encoded": "false",
            "locale": self.locale,
        }
        if self.api_key:
            params["key"] = self.api_key
        return params

    async def round_trip(
        self,
        http: httpx.AsyncClient,
        center: GeoPoint,
        distance_m: float,
        seed: int,
    ) -> Optional[EngineRoute]:
        """
        Ask the engine for one loop of roughly `distance_m` around `center`.

        The whole exchange is bounded by `timeout_s`, also for transports
        that do not apply httpx timeouts themselves.
        Returns the first path with at least two points, or None.
        """
        try:
            params = self.build_params(center, distance_m, seed)
        except (ValueError, OverflowError) as exc:
            logger.warning(f"Cannot build GraphHopper request (distance={distance_m} m): {exc}")
            return None

        try:
            response = await asyncio.wait_for(
                http.get("/route", params=params), timeout=self.timeout_s
            )
        except asyncio.TimeoutError:
            logger.warning(
                f"GraphHopper request timed out after {self.timeout_s:.1f} s "
                f"(distance={distance_m:.0f} m, seed={seed})"
            )
            return None
        except httpx.HTTPError as exc:
            logger.warning(
                f"GraphHopper request failed (distance={distance_m:.0f} m, seed={seed}): "
                f"{exc.__class__.__name__}: {exc}"
            )
            return None

        if response.status_code != 200:
            logger.warning(
                f"GraphHopper returned {response.status_code} "
                f"(distance={distance_m:.0f} m, seed={seed}): {response.text[:100]}"
            )
            return None

        try:
            body = GraphHopperResponse.model_validate(response.json())
            if not body.paths:
                logger.info(f"GraphHopper returned no paths (distance={distance_m:.0f} m, seed={seed})")
                return None
            path = body.paths[0]
            points = path.route_points()
        except ValueError as exc:
            logger.warning(f"Malformed GraphHopper response (seed={seed}): {exc}")
            return None

        if len(points) < 2:
            logger.warning(f"GraphHopper path with fewer than 2 points (seed={seed}), ignored")
            return None

        return EngineRoute(path=path, points=points)

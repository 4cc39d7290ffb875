# looproute/api/v1/routes_routing.py
from fastapi import APIRouter, HTTPException

from looproute.models.navigation import TurnsRequest, TurnsResponse
from looproute.models.routing import LoopRouteRequest, LoopRouteResponse
from looproute.services.route_generator import InvalidRouteRequest, RouteGenerator
from looproute.services.turn_extractor import extract_turns

router = APIRouter(
    prefix="/routes",
    tags=["routing"],
)

# Single shared instance
route_generator = RouteGenerator()


@router.post(
    "/loop",
    response_model=LoopRouteResponse,
    summary="Generate loop routes starting and ending at a point",
)
async def generate_loop(request: LoopRouteRequest) -> LoopRouteResponse:
    """
    Generate up to `count` loops of roughly `distance_km` around `center`.

    - Uses the routing engine's round_trip algorithm when configured.
    - Falls back to geometric loops otherwise (`method == "fallback"`).
    """
    try:
        routes = await route_generator.generate(request.center, request.distance_km, request.count)
    except InvalidRouteRequest as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    return LoopRouteResponse(routes=routes)


@router.post(
    "/turns",
    response_model=TurnsResponse,
    summary="Extract turn points from a route polyline",
)
async def route_turns(request: TurnsRequest) -> TurnsResponse:
    return TurnsResponse(turn_points=extract_turns(request.points))

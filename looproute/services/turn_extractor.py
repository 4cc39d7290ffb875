# looproute/services/turn_extractor.py
from typing import List, Optional, Sequence

from looproute.core.config import NavigationConfig, settings
from looproute.core.logger import logger
from looproute.models.navigation import Instruction, TurnPoint
from looproute.models.routing import GeoPoint
from looproute.services.geodesy import angle_difference_deg, bearing_deg, distance_m

ARRIVED = Instruction(text="Arrived", icon="arrive")
CONTINUE = Instruction(text="Continue straight", icon="straight")

# Upper bounds (exclusive) of |angle| for each band; anything above is sharp
STRAIGHT_MAX_DEG = 20.0
BEAR_MAX_DEG = 45.0
TURN_MAX_DEG = 120.0


def classify_turn(angle_deg: float) -> Instruction:
    """
    Map a signed turn angle to an instruction (positive = right).
    """
    magnitude = abs(angle_deg)
    if magnitude < STRAIGHT_MAX_DEG:
        return CONTINUE

    side = "right" if angle_deg > 0 else "left"
    if magnitude < BEAR_MAX_DEG:
        return Instruction(text=f"Bear {side}", icon=f"bear-{side}")
    if magnitude < TURN_MAX_DEG:
        return Instruction(text=f"Turn {side}", icon=f"turn-{side}")
    return Instruction(text=f"Sharp {side}", icon=f"sharp-{side}")


def extract_turns(
    points: Sequence[GeoPoint],
    config: Optional[NavigationConfig] = None,
) -> List[TurnPoint]:
    """
    Scan a route once and return the points where its direction changes.

    For every point with `lookahead` neighbours on both sides, the bearing
    from i-L to i is compared with the bearing from i to i+L. A turn is
    recorded when the change exceeds the threshold and the route has covered
    at least the minimum spacing since the previous turn (or the start).
    """
    config = config or settings.NAVIGATION
    lookahead = max(1, config.turn_lookahead)
    turns: List[TurnPoint] = []

    cumulative_m = 0.0
    last_turn_m = 0.0

    for i in range(len(points)):
        if i > 0:
            cumulative_m += distance_m(points[i - 1], points[i])

        if i < lookahead or i + lookahead >= len(points):
            continue

        before, here, after = points[i - lookahead], points[i], points[i + lookahead]
        # Repeated coordinates have no direction
        if (before.lat, before.lng) == (here.lat, here.lng) or (here.lat, here.lng) == (after.lat, after.lng):
            continue

        angle = angle_difference_deg(bearing_deg(before, here), bearing_deg(here, after))
        if abs(angle) <= config.turn_threshold_deg:
            continue
        if cumulative_m - last_turn_m <= config.turn_min_spacing_m:
            continue

        turns.append(
            TurnPoint(
                index=i,
                turn_angle_deg=angle,
                instruction=classify_turn(angle),
                distance_from_start_m=cumulative_m,
            )
        )
        last_turn_m = cumulative_m

    logger.debug(f"Extracted {len(turns)} turn point(s) from {len(points)} route points")
    return turns

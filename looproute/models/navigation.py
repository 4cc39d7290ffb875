# looproute/models/navigation.py

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from looproute.models.routing import GeoPoint, Route, RoutePoint


class Instruction(BaseModel):
    """
    Human-readable guidance plus an icon key for the client.
    """
    model_config = ConfigDict(frozen=True)

    text: str
    icon: str


class TurnPoint(BaseModel):
    """
    A place along the guide route where the heading changes enough to announce.

    turn_angle_deg is signed: positive to the right, negative to the left.
    """
    model_config = ConfigDict(frozen=True)

    index: int
    turn_angle_deg: float
    instruction: Instruction
    distance_from_start_m: float


class ProgressState(BaseModel):
    last_index: int = 0
    has_started: bool = False


class PositionFix(GeoPoint):
    """
    One GPS fix delivered to a navigation session.
    """
    heading: Optional[float] = None
    accuracy_m: Optional[float] = None
    # Unix seconds; the server clock is used when absent
    timestamp: Optional[float] = None


class NavigationUpdate(BaseModel):
    """
    Result of applying one fix to the progress tracker.
    """
    progress_index: int
    has_started: bool
    next_instruction: Instruction
    distance_to_next_m: float
    next_turn_index: Optional[int] = None
    distance_from_route_m: float
    arrived: bool = False


class CompletedRun(BaseModel):
    """
    Payload handed to the persistence collaborator when a run is saved.
    """
    path: List[GeoPoint]
    distance_km: float
    duration_s: float
    calories: Optional[int] = None


class TurnsRequest(BaseModel):
    points: List[RoutePoint] = Field(..., min_length=2)


class TurnsResponse(BaseModel):
    turn_points: List[TurnPoint]


class SessionCreateRequest(BaseModel):
    route: Route


class SessionCreateResponse(BaseModel):
    session_id: str
    total_points: int
    turn_points: List[TurnPoint]

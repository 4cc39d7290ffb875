# looproute/services/run_recorder.py
import time
from typing import List, Optional

from looproute.core.config import NavigationConfig, settings
from looproute.models.navigation import CompletedRun, PositionFix
from looproute.models.routing import GeoPoint
from looproute.services.geodesy import distance_km


class RunRecorder:
    """
    Accumulates the path actually run during a navigation session.

    Fixes closer than `min_record_step_m` to the last kept point are treated
    as jitter and neither extend the path nor the distance.
    """

    def __init__(self, config: Optional[NavigationConfig] = None) -> None:
        self.config = config or settings.NAVIGATION
        self.path: List[GeoPoint] = []
        self.distance_km = 0.0
        self.started_at: Optional[float] = None
        self.last_seen_at: Optional[float] = None

    def record(self, fix: PositionFix) -> bool:
        """
        Add a fix; return True if it was kept in the path.
        """
        now = fix.timestamp if fix.timestamp is not None else time.time()
        if self.started_at is None:
            self.started_at = now
        self.last_seen_at = max(now, self.last_seen_at or now)

        point = GeoPoint(lat=fix.lat, lng=fix.lng)
        if not self.path:
            self.path.append(point)
            return True

        delta_km = distance_km(self.path[-1], point)
        if delta_km * 1000.0 < self.config.min_record_step_m:
            return False

        self.path.append(point)
        self.distance_km += delta_km
        return True

    @property
    def duration_s(self) -> float:
        if self.started_at is None or self.last_seen_at is None:
            return 0.0
        return self.last_seen_at - self.started_at

    @property
    def calories(self) -> int:
        # Roughly 1 kcal per kg per km for a 70 kg runner
        return int(self.distance_km * self.config.kcal_per_km)

    def summary(self) -> CompletedRun:
        return CompletedRun(
            path=list(self.path),
            distance_km=self.distance_km,
            duration_s=self.duration_s,
            calories=self.calories,
        )

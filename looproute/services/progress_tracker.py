# looproute/services/progress_tracker.py
# Stateful matcher that maps GPS fixes onto the guide route polyline.
# Build once per guide route, then call update() on every fix, in order.

import math
from typing import List, Optional, Sequence, Tuple

from looproute.core.config import NavigationConfig, settings
from looproute.core.logger import logger
from looproute.models.navigation import NavigationUpdate, ProgressState, TurnPoint
from looproute.models.routing import GeoPoint
from looproute.services.geodesy import cumulative_distances_m, distance_m
from looproute.services.turn_extractor import ARRIVED, CONTINUE


class ProgressTracker:
    """
    Progress tracker for a single navigation session.

    Matching is a nearest-point search restricted to a window of route
    indices. Loops start and end at the same place, so until the runner has
    covered `start_fraction` of the route the search only looks at the first
    `start_search_fraction` of it; afterwards it follows `last_index` with a
    small window behind and a larger one ahead, and ignores jumps further
    back than `max_backtrack` indices.

    Usage:
        tracker = ProgressTracker(route.points, extract_turns(route.points))

        # Inside GPS loop:
        update = tracker.update(fix)
    """

    def __init__(
        self,
        points: Sequence[GeoPoint],
        turn_points: Sequence[TurnPoint],
        config: Optional[NavigationConfig] = None,
    ) -> None:
        if len(points) < 2:
            raise ValueError("A guide route needs at least 2 points")

        self.config = config or settings.NAVIGATION
        self.points: Tuple[GeoPoint, ...] = tuple(points)
        self.turn_points: Tuple[TurnPoint, ...] = tuple(sorted(turn_points, key=lambda t: t.index))
        self.cumulative_m: List[float] = cumulative_distances_m(self.points)
        self.state = ProgressState()

    # ------------------------------------------------------------------
    # Read-only properties
    # ------------------------------------------------------------------

    @property
    def total_points(self) -> int:
        return len(self.points)

    @property
    def last_index(self) -> int:
        return self.state.last_index

    @property
    def has_started(self) -> bool:
        return self.state.has_started

    # ------------------------------------------------------------------
    # Core method: call on every GPS update
    # ------------------------------------------------------------------

    def update(self, position: GeoPoint) -> NavigationUpdate:
        """
        Apply one fix and report progress plus the next instruction.
        """
        lo, hi = self.search_window()
        candidate, match_m = self._nearest_in_window(position, lo, hi)

        if self.state.has_started and candidate < self.state.last_index - self.config.max_backtrack:
            logger.debug(
                f"Ignoring backward jump {self.state.last_index} -> {candidate} (GPS noise)"
            )
        else:
            self.state.last_index = candidate

        if match_m > self.config.off_route_warning_m:
            logger.warning(
                f"Fix ({position.lat:.6f}, {position.lng:.6f}) is {match_m:.0f} m "
                f"from the route near index {candidate}"
            )

        self._promote_if_started()
        return self._build_update(match_m)

    def search_window(self) -> Tuple[int, int]:
        """
        Inclusive index range the next fix will be matched against.
        """
        n = len(self.points)
        last = self.state.last_index

        if not self.state.has_started:
            return 0, min(n - 1, max(1, int(n * self.config.start_search_fraction)))

        lo = max(0, last - self.config.window_behind)
        hi = min(n - 1, last + self.config.window_ahead)

        # Near the end the window must not reach back into the start region
        if last >= n * self.config.tail_fraction:
            lo = max(lo, min(last, int(n * self.config.start_search_fraction) + 1))

        return lo, hi

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _nearest_in_window(self, position: GeoPoint, lo: int, hi: int) -> Tuple[int, float]:
        best_index = lo
        best_m = math.inf
        for i in range(lo, hi + 1):
            d = distance_m(position, self.points[i])
            if d < best_m:
                best_index, best_m = i, d
        return best_index, best_m

    def _promote_if_started(self) -> None:
        if not self.state.has_started and self.state.last_index > len(self.points) * self.config.start_fraction:
            self.state.has_started = True
            logger.info(f"Navigation started at index {self.state.last_index}/{len(self.points)}")

    def _next_turn(self, index: int) -> Optional[TurnPoint]:
        for turn in self.turn_points:
            if turn.index > index:
                return turn
        return None

    def _build_update(self, match_m: float) -> NavigationUpdate:
        index = self.state.last_index
        turn = self._next_turn(index)

        if turn is not None:
            return NavigationUpdate(
                progress_index=index,
                has_started=self.state.has_started,
                next_instruction=turn.instruction,
                distance_to_next_m=self.cumulative_m[turn.index] - self.cumulative_m[index],
                next_turn_index=turn.index,
                distance_from_route_m=match_m,
            )

        remaining_m = self.cumulative_m[-1] - self.cumulative_m[index]
        arrived = remaining_m < self.config.arrival_threshold_m
        return NavigationUpdate(
            progress_index=index,
            has_started=self.state.has_started,
            next_instruction=ARRIVED if arrived else CONTINUE,
            distance_to_next_m=remaining_m,
            distance_from_route_m=match_m,
            arrived=arrived,
        )

# looproute/services/navigation_session.py
import asyncio
import time
import uuid
from typing import Callable, Dict, List, Optional

from looproute.core.config import NavigationConfig, settings
from looproute.core.logger import logger
from looproute.models.navigation import CompletedRun, NavigationUpdate, PositionFix, TurnPoint
from looproute.models.routing import Route
from looproute.services.progress_tracker import ProgressTracker
from looproute.services.run_recorder import RunRecorder
from looproute.services.turn_extractor import extract_turns


class SessionNotFound(KeyError):
    """
    Raised when a navigation session id is unknown, closed or expired.
    """


class NavigationSession:
    """
    One device following one guide route.

    Owns the progress state, the precomputed turn list and the run recorder.
    Fixes are applied one at a time in arrival order; the asyncio.Lock
    queues concurrent submissions FIFO.
    """

    def __init__(
        self,
        route: Route,
        config: Optional[NavigationConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.id = uuid.uuid4().hex
        self.route = route
        self.config = config or settings.NAVIGATION
        self.turn_points: List[TurnPoint] = extract_turns(route.points, self.config)
        self.tracker = ProgressTracker(route.points, self.turn_points, self.config)
        self.recorder = RunRecorder(self.config)
        self._clock = clock
        self.last_activity = clock()
        self._lock = asyncio.Lock()

    async def submit(self, fix: PositionFix) -> NavigationUpdate:
        async with self._lock:
            return self.apply(fix)

    def apply(self, fix: PositionFix) -> NavigationUpdate:
        self.touch()
        self.recorder.record(fix)
        return self.tracker.update(fix)

    def touch(self) -> None:
        self.last_activity = self._clock()

    def idle_for(self) -> float:
        return self._clock() - self.last_activity

    def summary(self) -> CompletedRun:
        return self.recorder.summary()


class NavigationSessionManager:
    """
    In-memory registry of active navigation sessions.

    Sessions live until closed, or until they have been idle for longer than
    `session_ttl_s`. Idle sessions are swept whenever a session is opened or
    looked up, so clients that simply stop sending fixes do not leak.
    """

    def __init__(
        self,
        config: Optional[NavigationConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or settings.NAVIGATION
        self.clock = clock
        self._sessions: Dict[str, NavigationSession] = {}

    def open(self, route: Route) -> NavigationSession:
        self.evict_idle()
        session = NavigationSession(route, self.config, self.clock)
        self._sessions[session.id] = session
        logger.info(
            f"Opened navigation session {session.id}: {len(route.points)} points, "
            f"{len(session.turn_points)} turn(s)"
        )
        return session

    def get(self, session_id: str) -> NavigationSession:
        self.evict_idle()
        try:
            session = self._sessions[session_id]
        except KeyError:
            raise SessionNotFound(session_id) from None
        session.touch()
        return session

    def close(self, session_id: str) -> CompletedRun:
        self.evict_idle()
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFound(session_id)
        summary = session.summary()
        logger.info(
            f"Closed navigation session {session_id}: {summary.distance_km:.2f} km "
            f"in {summary.duration_s:.0f} s"
        )
        return summary

    def evict_idle(self) -> int:
        expired = [
            session_id
            for session_id, session in self._sessions.items()
            if session.idle_for() > self.config.session_ttl_s
        ]
        for session_id in expired:
            del self._sessions[session_id]
        if expired:
            logger.info(f"Evicted {len(expired)} idle navigation session(s)")
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)

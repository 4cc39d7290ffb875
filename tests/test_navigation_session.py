# tests/test_navigation_session.py
import asyncio

import pytest

from looproute.core.config import NavigationConfig
from looproute.models.navigation import PositionFix
from looproute.models.routing import Route
from looproute.services.navigation_session import NavigationSessionManager, SessionNotFound
from looproute.services.run_recorder import RunRecorder
from route_factory import circle_loop, offset, straight_line


def fix_at(point, timestamp=None, **kwargs) -> PositionFix:
    return PositionFix(lat=point.lat, lng=point.lng, timestamp=timestamp, **kwargs)


def loop_route() -> Route:
    return Route(points=circle_loop(200), estimated_distance_km=2.0)


def test_recorder_ignores_jitter_and_sums_distance():
    points = straight_line(11)
    recorder = RunRecorder()

    assert recorder.record(fix_at(points[0], timestamp=1000.0))
    # 2 m away: jitter
    assert not recorder.record(fix_at(offset(points[0], north_m=2.0), timestamp=1001.0))
    for i, point in enumerate(points[1:], start=1):
        assert recorder.record(fix_at(point, timestamp=1000.0 + 5 * i))

    run = recorder.summary()
    assert len(run.path) == 11
    assert run.distance_km == pytest.approx(0.1, rel=1e-6)
    assert run.duration_s == pytest.approx(50.0)
    assert run.calories == int(run.distance_km * 70)
    assert run.calories in (6, 7)


def test_session_applies_fixes_in_order():
    manager = NavigationSessionManager()
    session = manager.open(loop_route())
    points = session.route.points

    async def feed():
        # Submitted concurrently; the session lock applies them one by one in order
        return await asyncio.gather(*(session.submit(fix_at(points[i], timestamp=float(i))) for i in range(0, 60, 3)))

    updates = asyncio.run(feed())
    progress = [u.progress_index for u in updates]

    assert progress == sorted(progress)
    assert progress[-1] == 57
    assert session.tracker.has_started


def test_closing_a_session_returns_the_run():
    manager = NavigationSessionManager()
    session = manager.open(loop_route())
    for i in range(0, 40, 4):
        session.apply(fix_at(session.route.points[i], timestamp=100.0 + i))

    run = manager.close(session.id)

    assert len(run.path) == 10
    assert run.duration_s == pytest.approx(36.0)
    assert len(manager) == 0
    with pytest.raises(SessionNotFound):
        manager.get(session.id)
    with pytest.raises(SessionNotFound):
        manager.close(session.id)


class FakeClock:
    def __init__(self, now: float = 0.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_idle_sessions_expire():
    clock = FakeClock()
    manager = NavigationSessionManager(NavigationConfig(session_ttl_s=60.0), clock=clock)
    idle = manager.open(loop_route())
    active = manager.open(loop_route())

    clock.now = 45.0
    active.apply(fix_at(active.route.points[0], timestamp=45.0))
    clock.now = 90.0

    assert manager.get(active.id) is active
    with pytest.raises(SessionNotFound):
        manager.get(idle.id)
    assert len(manager) == 1

    clock.now = 200.0
    assert manager.evict_idle() == 1
    assert len(manager) == 0
    with pytest.raises(SessionNotFound):
        manager.close(active.id)


def test_lookups_keep_a_session_alive():
    clock = FakeClock()
    manager = NavigationSessionManager(NavigationConfig(session_ttl_s=60.0), clock=clock)
    session = manager.open(loop_route())

    for step in range(1, 6):
        clock.now = 50.0 * step
        assert manager.get(session.id) is session
    assert len(manager) == 1

# looproute/api/v1/routes_navigation.py
from fastapi import APIRouter, HTTPException

from looproute.models.navigation import (
    CompletedRun,
    NavigationUpdate,
    PositionFix,
    SessionCreateRequest,
    SessionCreateResponse,
)
from looproute.services.navigation_session import (
    NavigationSession,
    NavigationSessionManager,
    SessionNotFound,
)

router = APIRouter(
    prefix="/navigation",
    tags=["navigation"],
)

# Single shared instance
session_manager = NavigationSessionManager()


def _get_session(session_id: str) -> NavigationSession:
    try:
        return session_manager.get(session_id)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail=f"Navigation session {session_id} not found")


@router.post(
    "/sessions",
    response_model=SessionCreateResponse,
    summary="Start guiding along a route",
)
async def open_session(request: SessionCreateRequest) -> SessionCreateResponse:
    """
    Open a navigation session for a guide route and return its turn points.
    """
    session = session_manager.open(request.route)
    return SessionCreateResponse(
        session_id=session.id,
        total_points=session.tracker.total_points,
        turn_points=session.turn_points,
    )


@router.post(
    "/sessions/{session_id}/positions",
    response_model=NavigationUpdate,
    summary="Apply one GPS fix to a session",
)
async def submit_position(session_id: str, fix: PositionFix) -> NavigationUpdate:
    session = _get_session(session_id)
    return await session.submit(fix)


@router.get(
    "/sessions/{session_id}/run",
    response_model=CompletedRun,
    summary="Current recorded run of a session",
)
async def get_run(session_id: str) -> CompletedRun:
    return _get_session(session_id).summary()


@router.delete(
    "/sessions/{session_id}",
    response_model=CompletedRun,
    summary="Close a session and return its recorded run",
)
async def close_session(session_id: str) -> CompletedRun:
    """
    The returned payload is what gets handed to run persistence.
    """
    try:
        return session_manager.close(session_id)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail=f"Navigation session {session_id} not found")

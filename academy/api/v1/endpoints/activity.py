"""
Activity Routes

Heartbeat endpoint used to keep "last active" times current.
"""

from fastapi import APIRouter

from academy.api.deps import BackendDep, CurrentUser
from academy.services import activity_service


router = APIRouter(prefix="/activity", tags=["Activity"])


@router.post(
    "/heartbeat",
    summary="Record user activity",
)
async def heartbeat(
    current_user: CurrentUser,
    backend: BackendDep,
) -> dict:
    """
    Record that the current user is active.

    Clients may call this on every interaction; the backend is updated at
    most once per throttle window.
    """
    recorded = await activity_service.record_activity(backend, current_user.id)
    return {"recorded": recorded}

"""Stats session endpoints."""

from fastapi import APIRouter, Depends

from statsync.api.deps import get_app_context
from statsync.api.schemas import SessionResponse, SessionStart
from statsync.app_context import AppContext

router = APIRouter(prefix="/session", tags=["session"])


@router.post("", response_model=SessionResponse, status_code=201)
async def start_session(
    data: SessionStart,
    context: AppContext = Depends(get_app_context),
) -> SessionResponse:
    """Start a stats session for a user and run the initial load."""
    service = await context.start_session(data.user_id)
    await service.load()
    return SessionResponse(user_id=service.scope, active=True)


@router.get("", response_model=SessionResponse)
def get_session(context: AppContext = Depends(get_app_context)) -> SessionResponse:
    """Get the active session, if any."""
    if not context.has_session:
        return SessionResponse(user_id=None, active=False)
    return SessionResponse(user_id=context.stats.scope, active=True)


@router.delete("", status_code=204)
async def end_session(context: AppContext = Depends(get_app_context)) -> None:
    """End the active session."""
    await context.end_session()

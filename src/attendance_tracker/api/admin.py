"""Admin API endpoints with simple token auth."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status

if TYPE_CHECKING:
    from attendance_tracker.containers import AppContainer

router = APIRouter(prefix="/admin", tags=["admin"])


def _get_admin_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.admin_token


async def require_admin(
    x_admin_token: str | None = Header(default=None),
    admin_token: str = Depends(_get_admin_token),
) -> None:
    """Ensure requests include a valid admin token."""
    if not x_admin_token or x_admin_token != admin_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/health", dependencies=[Depends(require_admin)])
async def admin_health(request: Request) -> dict[str, object]:
    """Admin health check with background work counters."""
    container: AppContainer = request.app.state.container
    return {"status": "ok", "background_tasks": container.background.pending}


@router.get("/sessions", dependencies=[Depends(require_admin)])
async def list_sessions(request: Request, limit: int = 20) -> dict[str, object]:
    """Return recent sessions with attendance counts."""
    container: AppContainer = request.app.state.container
    return {"sessions": container.admin_service.list_sessions(limit)}


@router.post("/sessions/{session_id}/end", dependencies=[Depends(require_admin)])
async def end_session(session_id: int, request: Request) -> dict[str, object]:
    """Expire a session immediately."""
    container: AppContainer = request.app.state.container
    notified = await container.session_service.end_session(session_id)
    return {"sessionId": session_id, "active": False, "notified": notified}


@router.post("/sweep", dependencies=[Depends(require_admin)])
async def sweep(request: Request) -> dict[str, int]:
    """Expire every overdue session now."""
    container: AppContainer = request.app.state.container
    expired = await container.session_service.expire_overdue()
    return {"expired": expired}

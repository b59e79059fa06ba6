"""Reminder API endpoints for guardian clients."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Request, status

from attendance_tracker.services.reminders import serialize_reminder

if TYPE_CHECKING:
    from attendance_tracker.containers import AppContainer

router = APIRouter(prefix="/api/reminders", tags=["reminders"])


@router.get("/user/{user_id}")
async def reminders_for_user(user_id: int, request: Request) -> dict[str, object]:
    """Return reminders addressed to a user."""
    container: AppContainer = request.app.state.container
    reminders = container.reminder_service.list_for_user(user_id)
    return {"reminders": [serialize_reminder(reminder) for reminder in reminders]}


@router.post("/{reminder_id}/complete")
async def complete_reminder(reminder_id: int, request: Request) -> dict[str, str]:
    """Mark a reminder as completed."""
    container: AppContainer = request.app.state.container
    if not container.reminder_service.complete(reminder_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Reminder not found"
        )
    return {"message": "Reminder updated successfully"}

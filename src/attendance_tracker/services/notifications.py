"""Guardian notifications submitted as reminders."""

import logging
from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Protocol

from attendance_tracker.adapters.push_client import PushClient
from attendance_tracker.domain.errors import NotificationFailure
from attendance_tracker.domain.reminders import ReminderRecord, ReminderRequest

logger = logging.getLogger(__name__)

ABSENCE_TITLE = "Attendance Alert"
PRESENCE_TITLE = "Attendance Confirmed"


class ReminderRepository(Protocol):
    """Persistence interface for reminders."""

    def create_reminder(self, request: ReminderRequest) -> ReminderRecord:
        """Insert a reminder row and return it."""

    def list_for_user(self, user_id: int) -> list[ReminderRecord]:
        """Return reminders addressed to a user, newest first."""

    def mark_completed(self, reminder_id: int) -> bool:
        """Flag a reminder as completed; return false if it does not exist."""


@dataclass
class NotificationDispatcher:
    """Persist reminders and forward them to an optional push webhook."""

    reminder_repository: ReminderRepository
    push_client: PushClient | None = None

    async def dispatch(self, request: ReminderRequest) -> bool:
        """Submit a reminder; failures are logged and reported as ``False``."""
        try:
            await self.send(request)
        except NotificationFailure:
            logger.exception(
                "Failed to dispatch guardian notification",
                extra={"user_id": request.user_id, "title": request.title},
            )
            return False
        return True

    async def send(self, request: ReminderRequest) -> ReminderRecord:
        """Submit a reminder and raise ``NotificationFailure`` on any error."""
        try:
            reminder = self.reminder_repository.create_reminder(request)
            if self.push_client is not None:
                await self.push_client.push(reminder)
        except Exception as exc:
            raise NotificationFailure(
                f"Could not notify user {request.user_id}"
            ) from exc
        return reminder


def absence_notice(
    guardian_id: int, student_name: str, session_name: str, session_date: date
) -> ReminderRequest:
    """Build the reminder sent when a student stays absent."""
    return ReminderRequest(
        title=ABSENCE_TITLE,
        description=(
            f"{student_name} was marked absent from {session_name} "
            f"on {session_date.isoformat()}."
        ),
        user_id=guardian_id,
        reminder_date=datetime.now(tz=UTC),
    )


def presence_notice(
    guardian_id: int, student_name: str, session_name: str, checked_in_at: datetime
) -> ReminderRequest:
    """Build the reminder sent when a student checks in."""
    return ReminderRequest(
        title=PRESENCE_TITLE,
        description=(
            f"{student_name} checked in to {session_name} "
            f"at {checked_in_at.strftime('%H:%M')} UTC."
        ),
        user_id=guardian_id,
        reminder_date=checked_in_at,
    )

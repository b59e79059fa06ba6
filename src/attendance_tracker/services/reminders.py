"""Guardian-facing reminder listing."""

from dataclasses import dataclass

from attendance_tracker.domain.reminders import ReminderRecord
from attendance_tracker.services.notifications import ReminderRepository


@dataclass
class ReminderService:
    """Service for reading and acknowledging reminders."""

    repository: ReminderRepository

    def list_for_user(self, user_id: int) -> list[ReminderRecord]:
        """Return reminders addressed to a user."""
        return self.repository.list_for_user(user_id)

    def complete(self, reminder_id: int) -> bool:
        """Mark a reminder as completed."""
        return self.repository.mark_completed(reminder_id)


def serialize_reminder(reminder: ReminderRecord) -> dict[str, object]:
    """Return a JSON-friendly reminder."""
    return {
        "id": reminder.id,
        "title": reminder.title,
        "description": reminder.description,
        "user_id": reminder.user_id,
        "reminder_date": reminder.reminder_date.isoformat(),
        "is_completed": reminder.is_completed,
    }

"""Supabase repository for reminders."""

from dataclasses import dataclass
from datetime import datetime

from supabase import Client

from attendance_tracker.domain.errors import StoreError
from attendance_tracker.domain.reminders import ReminderRecord, ReminderRequest
from attendance_tracker.services.notifications import ReminderRepository

_REMINDER_COLUMNS = "id, title, description, user_id, reminder_date, is_completed"


@dataclass
class SupabaseReminderRepository(ReminderRepository):
    """Supabase implementation for reminders."""

    client: Client

    def create_reminder(self, request: ReminderRequest) -> ReminderRecord:
        """Insert a reminder row and return it."""
        response = (
            self.client.table("reminders")
            .insert(
                {
                    "title": request.title,
                    "description": request.description,
                    "user_id": request.user_id,
                    "reminder_date": request.reminder_date.isoformat(),
                    "is_completed": False,
                }
            )
            .execute()
        )
        if not response.data:
            raise StoreError("Failed to create reminder")
        return _parse_reminder(response.data[0])

    def list_for_user(self, user_id: int) -> list[ReminderRecord]:
        """Return reminders for a user, newest first."""
        response = (
            self.client.table("reminders")
            .select(_REMINDER_COLUMNS)
            .eq("user_id", user_id)
            .order("reminder_date", desc=True)
            .execute()
        )
        return [_parse_reminder(row) for row in response.data or []]

    def mark_completed(self, reminder_id: int) -> bool:
        """Flag a reminder as completed."""
        response = (
            self.client.table("reminders")
            .update({"is_completed": True})
            .eq("id", reminder_id)
            .execute()
        )
        return bool(response.data)


def _parse_reminder(row: dict[str, object]) -> ReminderRecord:
    return ReminderRecord(
        id=int(row["id"]),
        title=str(row.get("title", "")),
        description=str(row.get("description") or ""),
        user_id=int(row["user_id"]),
        reminder_date=datetime.fromisoformat(str(row["reminder_date"])),
        is_completed=bool(row.get("is_completed")),
    )

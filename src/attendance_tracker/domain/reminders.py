"""Domain models for guardian reminders."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class ReminderRequest:
    """Structured reminder submitted to the notification sink."""

    title: str
    description: str
    user_id: int
    reminder_date: datetime


@dataclass(frozen=True)
class ReminderRecord:
    """Reminder row stored for a user."""

    id: int
    title: str
    description: str
    user_id: int
    reminder_date: datetime
    is_completed: bool

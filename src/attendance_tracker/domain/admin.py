"""Admin domain models."""

from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True)
class SessionOverview:
    """Admin view of a session with attendance counts."""

    session_id: int
    name: str
    date: date
    teacher_id: int
    active: bool
    expires_at: datetime
    present: int
    absent: int

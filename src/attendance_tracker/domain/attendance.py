"""Domain models for attendance ledger rows."""

from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum


class AttendanceStatus(StrEnum):
    """Attendance status stored per student and session."""

    ABSENT = "absent"
    PRESENT = "present"


@dataclass(frozen=True)
class AttendanceRecord:
    """Ledger row keyed by session and student."""

    session_id: int
    student_id: int
    status: AttendanceStatus
    timestamp: datetime
    date: date


@dataclass(frozen=True)
class AttendanceRow:
    """Ledger row joined with the student's profile."""

    session_id: int
    student_id: int
    full_name: str
    year_level: str | None
    section: str | None
    courses: str | None
    status: AttendanceStatus
    date: date
    timestamp: datetime


@dataclass(frozen=True)
class AttendanceFilter:
    """Criteria for attendance reports."""

    courses: str
    year_level: str
    section: str
    date: date


@dataclass(frozen=True)
class CheckInResult:
    """Outcome of a successful check-in."""

    status: AttendanceStatus
    guardian_notified: bool
    message: str

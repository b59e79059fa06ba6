"""Domain models for attendance sessions."""

from dataclasses import dataclass
from datetime import date, datetime


@dataclass(frozen=True)
class CourseScope:
    """Eligibility filter used to seed a session's ledger."""

    courses: str
    section: str
    year_level: str


@dataclass(frozen=True)
class SessionRecord:
    """Represents a persisted attendance session."""

    id: int
    name: str
    date: date
    teacher_id: int
    active: bool
    created_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class ScannableToken:
    """Payload carried by a session QR code."""

    session_id: int
    date: date
    expires_at: datetime


@dataclass(frozen=True)
class CreatedSession:
    """Result returned to the teacher after creating a session."""

    session_id: int
    qr_code: str
    expires_at: datetime


@dataclass(frozen=True)
class SessionSummary:
    """Lightweight session listing entry."""

    session_id: int
    name: str
    date: date
    active: bool

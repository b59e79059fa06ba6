"""Read-only attendance reports."""

from dataclasses import dataclass

from attendance_tracker.domain.attendance import AttendanceFilter, AttendanceRow
from attendance_tracker.services.attendance import AttendanceRepository


@dataclass
class AttendanceReportService:
    """Service for attendance listings."""

    repository: AttendanceRepository

    def by_criteria(self, criteria: AttendanceFilter) -> list[AttendanceRow]:
        """Return attendance for a class section on a date."""
        return self.repository.list_rows_by_criteria(criteria)

    def by_session(self, session_id: int) -> list[AttendanceRow]:
        """Return attendance recorded for a session."""
        return self.repository.list_rows_by_session(session_id)


def serialize_row(row: AttendanceRow) -> dict[str, object]:
    """Return a JSON-friendly attendance row."""
    return {
        "student_id": row.student_id,
        "session_id": row.session_id,
        "full_name": row.full_name,
        "year_level": row.year_level,
        "section": row.section,
        "courses": row.courses,
        "status": row.status.value,
        "date": row.date.isoformat(),
        "timestamp": row.timestamp.isoformat(),
    }

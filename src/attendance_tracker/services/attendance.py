"""Per-session attendance ledger."""

from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Protocol

from attendance_tracker.domain.attendance import (
    AttendanceFilter,
    AttendanceRecord,
    AttendanceRow,
    AttendanceStatus,
)
from attendance_tracker.domain.errors import AlreadyEnrolledError, NotEnrolledError


class AttendanceRepository(Protocol):
    """Persistence interface for attendance rows."""

    def insert_records(self, records: list[AttendanceRecord]) -> None:
        """Insert rows, ignoring pairs that already exist."""

    def get_record(self, session_id: int, student_id: int) -> AttendanceRecord | None:
        """Return the row for a session/student pair, if present."""

    def update_status(
        self,
        session_id: int,
        student_id: int,
        status: AttendanceStatus,
        timestamp: datetime,
    ) -> None:
        """Update status and timestamp of a single row."""

    def list_records(
        self, session_id: int, status: AttendanceStatus | None = None
    ) -> list[AttendanceRecord]:
        """Return rows for a session, optionally filtered by status."""

    def delete_record(self, session_id: int, student_id: int) -> None:
        """Delete the row for a session/student pair."""

    def list_rows_by_session(self, session_id: int) -> list[AttendanceRow]:
        """Return rows for a session joined with student details."""

    def list_rows_by_criteria(self, criteria: AttendanceFilter) -> list[AttendanceRow]:
        """Return rows for a date joined with students matching the criteria."""


@dataclass
class AttendanceLedger:
    """Attendance rows keyed by (session_id, student_id)."""

    repository: AttendanceRepository

    def seed(
        self, session_id: int, student_ids: list[int], session_date: date
    ) -> int:
        """Insert an ``absent`` row per student and return how many were sent."""
        now = datetime.now(tz=UTC)
        records = [
            AttendanceRecord(
                session_id=session_id,
                student_id=student_id,
                status=AttendanceStatus.ABSENT,
                timestamp=now,
                date=session_date,
            )
            for student_id in dict.fromkeys(student_ids)
        ]
        if records:
            self.repository.insert_records(records)
        return len(records)

    def get(self, session_id: int, student_id: int) -> AttendanceRecord | None:
        """Return a ledger row."""
        return self.repository.get_record(session_id, student_id)

    def set_status(
        self,
        session_id: int,
        student_id: int,
        status: AttendanceStatus,
        timestamp: datetime,
    ) -> None:
        """Set the status of a single row."""
        self.repository.update_status(session_id, student_id, status, timestamp)

    def list_by_status(
        self, session_id: int, status: AttendanceStatus
    ) -> list[AttendanceRecord]:
        """Return a session's rows with the given status."""
        return self.repository.list_records(session_id, status=status)

    def list_by_session(self, session_id: int) -> list[AttendanceRecord]:
        """Return every row of a session."""
        return self.repository.list_records(session_id)

    def roster(self, session_id: int) -> list[AttendanceRow]:
        """Return a session's rows joined with student names."""
        return self.repository.list_rows_by_session(session_id)

    def enroll(
        self, session_id: int, student_id: int, session_date: date
    ) -> AttendanceRecord:
        """Add a student to a session as ``absent``."""
        if self.get(session_id, student_id) is not None:
            raise AlreadyEnrolledError(
                f"Student {student_id} is already in session {session_id}"
            )
        record = AttendanceRecord(
            session_id=session_id,
            student_id=student_id,
            status=AttendanceStatus.ABSENT,
            timestamp=datetime.now(tz=UTC),
            date=session_date,
        )
        self.repository.insert_records([record])
        return record

    def withdraw(self, session_id: int, student_id: int) -> None:
        """Remove a student from a session."""
        if self.get(session_id, student_id) is None:
            raise NotEnrolledError(
                f"Student {student_id} is not in session {session_id}"
            )
        self.repository.delete_record(session_id, student_id)

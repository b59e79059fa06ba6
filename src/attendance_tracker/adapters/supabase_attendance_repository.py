"""Supabase repository for attendance rows."""

from dataclasses import dataclass
from datetime import date, datetime

from supabase import Client

from attendance_tracker.domain.attendance import (
    AttendanceFilter,
    AttendanceRecord,
    AttendanceRow,
    AttendanceStatus,
)
from attendance_tracker.services.attendance import AttendanceRepository

_RECORD_COLUMNS = "student_id, session_id, date, status, timestamp"
_ROW_COLUMNS = (
    "student_id, session_id, date, status, timestamp, "
    "users!inner(full_name, year_level, section, courses)"
)


@dataclass
class SupabaseAttendanceRepository(AttendanceRepository):
    """Supabase implementation for the attendance ledger."""

    client: Client

    def insert_records(self, records: list[AttendanceRecord]) -> None:
        """Insert rows; existing (student, session) pairs are left untouched."""
        payload = [
            {
                "student_id": record.student_id,
                "session_id": record.session_id,
                "date": record.date.isoformat(),
                "status": record.status.value,
                "timestamp": record.timestamp.isoformat(),
            }
            for record in records
        ]
        if payload:
            self.client.table("attendance_status").upsert(
                payload,
                on_conflict="student_id,session_id",
                ignore_duplicates=True,
            ).execute()

    def get_record(self, session_id: int, student_id: int) -> AttendanceRecord | None:
        """Return one ledger row."""
        response = (
            self.client.table("attendance_status")
            .select(_RECORD_COLUMNS)
            .eq("session_id", session_id)
            .eq("student_id", student_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_record(response.data[0])

    def update_status(
        self,
        session_id: int,
        student_id: int,
        status: AttendanceStatus,
        timestamp: datetime,
    ) -> None:
        """Update a single row's status."""
        self.client.table("attendance_status").update(
            {"status": status.value, "timestamp": timestamp.isoformat()}
        ).eq("session_id", session_id).eq("student_id", student_id).execute()

    def list_records(
        self, session_id: int, status: AttendanceStatus | None = None
    ) -> list[AttendanceRecord]:
        """Return rows for a session."""
        query = (
            self.client.table("attendance_status")
            .select(_RECORD_COLUMNS)
            .eq("session_id", session_id)
        )
        if status is not None:
            query = query.eq("status", status.value)
        response = query.execute()
        return [_parse_record(row) for row in response.data or []]

    def delete_record(self, session_id: int, student_id: int) -> None:
        """Delete a single row."""
        self.client.table("attendance_status").delete().eq(
            "session_id", session_id
        ).eq("student_id", student_id).execute()

    def list_rows_by_session(self, session_id: int) -> list[AttendanceRow]:
        """Return a session's rows joined with the users table."""
        response = (
            self.client.table("attendance_status")
            .select(_ROW_COLUMNS)
            .eq("session_id", session_id)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]

    def list_rows_by_criteria(self, criteria: AttendanceFilter) -> list[AttendanceRow]:
        """Return rows on a date for students in a course, year and section."""
        response = (
            self.client.table("attendance_status")
            .select(_ROW_COLUMNS)
            .eq("date", criteria.date.isoformat())
            .eq("users.courses", criteria.courses)
            .eq("users.year_level", criteria.year_level)
            .eq("users.section", criteria.section)
            .execute()
        )
        return [_parse_row(row) for row in response.data or []]


def _parse_record(row: dict[str, object]) -> AttendanceRecord:
    return AttendanceRecord(
        session_id=int(row["session_id"]),
        student_id=int(row["student_id"]),
        status=AttendanceStatus(str(row["status"])),
        timestamp=datetime.fromisoformat(str(row["timestamp"])),
        date=date.fromisoformat(str(row["date"])[:10]),
    )


def _parse_row(row: dict[str, object]) -> AttendanceRow:
    user = row.get("users") or {}
    if not isinstance(user, dict):
        user = {}
    return AttendanceRow(
        session_id=int(row["session_id"]),
        student_id=int(row["student_id"]),
        full_name=str(user.get("full_name") or ""),
        year_level=user.get("year_level"),
        section=user.get("section"),
        courses=user.get("courses"),
        status=AttendanceStatus(str(row["status"])),
        date=date.fromisoformat(str(row["date"])[:10]),
        timestamp=datetime.fromisoformat(str(row["timestamp"])),
    )

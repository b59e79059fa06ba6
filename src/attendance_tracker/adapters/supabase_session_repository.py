"""Supabase-backed session repository."""

from dataclasses import dataclass
from datetime import date, datetime

from supabase import Client, PostgrestAPIError

from attendance_tracker.domain.errors import SessionIdConflictError, StoreError
from attendance_tracker.domain.sessions import SessionRecord
from attendance_tracker.services.sessions import SessionRepository

_SESSION_COLUMNS = "id, name, date, teacher_id, active, created_at, expires_at"
_UNIQUE_VIOLATION = "23505"


@dataclass
class SupabaseSessionRepository(SessionRepository):
    """Supabase implementation for attendance sessions."""

    client: Client

    def session_exists(self, session_id: int) -> bool:
        """Return true when a session row uses the id."""
        response = (
            self.client.table("sessions")
            .select("id")
            .eq("id", session_id)
            .limit(1)
            .execute()
        )
        return bool(response.data)

    def create_session(  # noqa: PLR0913
        self,
        session_id: int,
        name: str,
        session_date: date,
        teacher_id: int,
        created_at: datetime,
        expires_at: datetime,
    ) -> SessionRecord:
        """Create a session row and return it."""
        try:
            response = (
                self.client.table("sessions")
                .insert(
                    {
                        "id": session_id,
                        "name": name,
                        "date": session_date.isoformat(),
                        "teacher_id": teacher_id,
                        "active": True,
                        "created_at": created_at.isoformat(),
                        "expires_at": expires_at.isoformat(),
                    }
                )
                .execute()
            )
        except PostgrestAPIError as exc:
            if exc.code == _UNIQUE_VIOLATION:
                raise SessionIdConflictError(
                    f"Session id {session_id} already exists"
                ) from exc
            raise StoreError("Failed to create session") from exc
        if not response.data:
            raise StoreError("Failed to create session")
        return _parse_session(response.data[0])

    def get_session(self, session_id: int) -> SessionRecord | None:
        """Return a session by id, if present."""
        response = (
            self.client.table("sessions")
            .select(_SESSION_COLUMNS)
            .eq("id", session_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_session(response.data[0])

    def deactivate_session(self, session_id: int) -> bool:
        """Mark an active session inactive; report whether a row changed."""
        response = (
            self.client.table("sessions")
            .update({"active": False})
            .eq("id", session_id)
            .eq("active", True)
            .execute()
        )
        return bool(response.data)

    def list_sessions(self, limit: int | None = None) -> list[SessionRecord]:
        """Return sessions ordered by creation time, newest first."""
        query = (
            self.client.table("sessions")
            .select(_SESSION_COLUMNS)
            .order("created_at", desc=True)
        )
        if limit is not None:
            query = query.limit(limit)
        response = query.execute()
        return [_parse_session(row) for row in response.data or []]

    def list_active_sessions(self) -> list[SessionRecord]:
        """Return sessions still marked active, soonest expiry first."""
        response = (
            self.client.table("sessions")
            .select(_SESSION_COLUMNS)
            .eq("active", True)
            .order("expires_at", desc=False)
            .execute()
        )
        return [_parse_session(row) for row in response.data or []]


def _parse_session(row: dict[str, object]) -> SessionRecord:
    return SessionRecord(
        id=int(row["id"]),
        name=str(row.get("name", "")),
        date=date.fromisoformat(str(row["date"])[:10]),
        teacher_id=int(row["teacher_id"]),
        active=bool(row.get("active")),
        created_at=datetime.fromisoformat(str(row["created_at"])),
        expires_at=datetime.fromisoformat(str(row["expires_at"])),
    )

"""Supabase-backed user repository."""

from dataclasses import dataclass

from supabase import Client

from attendance_tracker.domain.models import UserRecord
from attendance_tracker.domain.sessions import CourseScope
from attendance_tracker.services.users import UserRepository

_USER_COLUMNS = (
    "id, full_name, user_role, linked_student_id, courses, section, year_level"
)


@dataclass
class SupabaseUserRepository(UserRepository):
    """Supabase implementation for identity lookups."""

    client: Client

    def get_user(self, user_id: int) -> UserRecord | None:
        """Return the user with the given id, if present."""
        response = (
            self.client.table("users")
            .select(_USER_COLUMNS)
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
        if response.data:
            return _parse_user(response.data[0])
        return None

    def list_users_in_scope(self, scope: CourseScope, role: str) -> list[UserRecord]:
        """Return users matching a course, section and year level."""
        response = (
            self.client.table("users")
            .select(_USER_COLUMNS)
            .eq("user_role", role)
            .eq("courses", scope.courses)
            .eq("section", scope.section)
            .eq("year_level", scope.year_level)
            .execute()
        )
        return [_parse_user(row) for row in response.data or []]

    def find_linked_user(self, student_id: int, role: str) -> UserRecord | None:
        """Return the first user of ``role`` linked to a student."""
        response = (
            self.client.table("users")
            .select(_USER_COLUMNS)
            .eq("linked_student_id", student_id)
            .eq("user_role", role)
            .limit(1)
            .execute()
        )
        if response.data:
            return _parse_user(response.data[0])
        return None


def _parse_user(row: dict[str, object]) -> UserRecord:
    linked = row.get("linked_student_id")
    return UserRecord(
        id=int(row["id"]),
        full_name=str(row.get("full_name") or ""),
        role=str(row.get("user_role") or ""),
        linked_student_id=int(linked) if linked is not None else None,
        courses=row.get("courses"),
        section=row.get("section"),
        year_level=row.get("year_level"),
    )

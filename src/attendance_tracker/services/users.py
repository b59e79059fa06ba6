"""Identity lookups used by the attendance core."""

from dataclasses import dataclass
from typing import Protocol

from attendance_tracker.domain.models import (
    PARENT_ROLE,
    STUDENT_ROLE,
    TEACHER_ROLE,
    UserRecord,
)
from attendance_tracker.domain.sessions import CourseScope


class UserRepository(Protocol):
    """Persistence interface for user data."""

    def get_user(self, user_id: int) -> UserRecord | None:
        """Return the user with the given id, if present."""

    def list_users_in_scope(self, scope: CourseScope, role: str) -> list[UserRecord]:
        """Return users of ``role`` matching course, section and year level."""

    def find_linked_user(self, student_id: int, role: str) -> UserRecord | None:
        """Return a user of ``role`` linked to the student, if present."""


@dataclass
class UserService:
    """Application service for role checks and guardian linkage."""

    repository: UserRepository

    def is_teacher(self, user_id: int) -> bool:
        """Return true when the id resolves to a teacher."""
        user = self.repository.get_user(user_id)
        return user is not None and user.role == TEACHER_ROLE

    def get_user(self, user_id: int) -> UserRecord | None:
        """Return a user by id."""
        return self.repository.get_user(user_id)

    def students_in_scope(self, scope: CourseScope) -> list[UserRecord]:
        """Snapshot of students eligible for a session scope."""
        return self.repository.list_users_in_scope(scope, role=STUDENT_ROLE)

    def guardian_for(self, student_id: int) -> UserRecord | None:
        """Return the parent linked to a student, if any."""
        return self.repository.find_linked_user(student_id, role=PARENT_ROLE)

"""Domain models for identities."""

from dataclasses import dataclass

TEACHER_ROLE = "teacher"
STUDENT_ROLE = "student"
PARENT_ROLE = "parent"


@dataclass(frozen=True)
class UserRecord:
    """Represents a user stored in the database."""

    id: int
    full_name: str
    role: str
    linked_student_id: int | None = None
    courses: str | None = None
    section: str | None = None
    year_level: str | None = None

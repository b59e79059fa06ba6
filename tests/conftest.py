"""Shared test fixtures."""

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta

import pytest

from attendance_tracker.config import Settings
from attendance_tracker.containers import AppContainer
from attendance_tracker.domain.attendance import (
    AttendanceFilter,
    AttendanceRecord,
    AttendanceRow,
    AttendanceStatus,
)
from attendance_tracker.domain.errors import SessionIdConflictError, StoreError
from attendance_tracker.domain.geo import GeoPoint
from attendance_tracker.domain.models import UserRecord
from attendance_tracker.domain.reminders import ReminderRecord, ReminderRequest
from attendance_tracker.domain.sessions import CourseScope, SessionRecord
from attendance_tracker.services.admin import AdminService
from attendance_tracker.services.attendance import (
    AttendanceLedger,
    AttendanceRepository,
)
from attendance_tracker.services.background import BackgroundTaskRunner
from attendance_tracker.services.notifications import (
    NotificationDispatcher,
    ReminderRepository,
)
from attendance_tracker.services.reminders import ReminderService
from attendance_tracker.services.reports import AttendanceReportService
from attendance_tracker.services.scheduler import DeferredJobScheduler
from attendance_tracker.services.sessions import SessionRepository, SessionService
from attendance_tracker.services.users import UserRepository, UserService

REFERENCE_POINT = GeoPoint(latitude=15.145370, longitude=120.596070)
TEACHER_ID = 1
STUDENT_ANA = 11
STUDENT_BEN = 12
STUDENT_OTHER_SECTION = 13
STUDENT_NO_GUARDIAN = 14
PARENT_OF_ANA = 21
PARENT_OF_BEN = 22
MATH_SCOPE = CourseScope(courses="CS", section="A", year_level="3")


@dataclass
class InMemoryUserRepository(UserRepository):
    """In-memory user repository for tests."""

    users: dict[int, UserRecord] = field(default_factory=dict)

    def add(self, user: UserRecord) -> UserRecord:
        self.users[user.id] = user
        return user

    def get_user(self, user_id: int) -> UserRecord | None:
        return self.users.get(user_id)

    def list_users_in_scope(self, scope: CourseScope, role: str) -> list[UserRecord]:
        return [
            user
            for user in self.users.values()
            if user.role == role
            and user.courses == scope.courses
            and user.section == scope.section
            and user.year_level == scope.year_level
        ]

    def find_linked_user(self, student_id: int, role: str) -> UserRecord | None:
        for user in self.users.values():
            if user.linked_student_id == student_id and user.role == role:
                return user
        return None


@dataclass
class InMemorySessionRepository(SessionRepository):
    """In-memory session repository for tests."""

    sessions: dict[int, SessionRecord] = field(default_factory=dict)
    hidden_ids: set[int] = field(default_factory=set)
    deactivations: list[int] = field(default_factory=list)

    def session_exists(self, session_id: int) -> bool:
        return session_id in self.sessions

    def create_session(  # noqa: PLR0913
        self,
        session_id: int,
        name: str,
        session_date: date,
        teacher_id: int,
        created_at: datetime,
        expires_at: datetime,
    ) -> SessionRecord:
        if session_id in self.sessions or session_id in self.hidden_ids:
            raise SessionIdConflictError(f"Session id {session_id} already exists")
        session = SessionRecord(
            id=session_id,
            name=name,
            date=session_date,
            teacher_id=teacher_id,
            active=True,
            created_at=created_at,
            expires_at=expires_at,
        )
        self.sessions[session_id] = session
        return session

    def get_session(self, session_id: int) -> SessionRecord | None:
        return self.sessions.get(session_id)

    def deactivate_session(self, session_id: int) -> bool:
        session = self.sessions.get(session_id)
        if session is None or not session.active:
            return False
        self.sessions[session_id] = SessionRecord(
            id=session.id,
            name=session.name,
            date=session.date,
            teacher_id=session.teacher_id,
            active=False,
            created_at=session.created_at,
            expires_at=session.expires_at,
        )
        self.deactivations.append(session_id)
        return True

    def list_sessions(self, limit: int | None = None) -> list[SessionRecord]:
        ordered = sorted(
            self.sessions.values(), key=lambda session: session.created_at, reverse=True
        )
        return ordered if limit is None else ordered[:limit]

    def list_active_sessions(self) -> list[SessionRecord]:
        return [session for session in self.sessions.values() if session.active]

    def put(  # noqa: PLR0913
        self,
        session_id: int,
        *,
        name: str = "Math 101",
        active: bool = True,
        expires_in: timedelta = timedelta(minutes=10),
        session_date: date | None = None,
        teacher_id: int = TEACHER_ID,
    ) -> SessionRecord:
        now = datetime.now(tz=UTC)
        session = SessionRecord(
            id=session_id,
            name=name,
            date=session_date or now.date(),
            teacher_id=teacher_id,
            active=active,
            created_at=now + expires_in - timedelta(minutes=10),
            expires_at=now + expires_in,
        )
        self.sessions[session_id] = session
        return session


@dataclass
class InMemoryAttendanceRepository(AttendanceRepository):
    """In-memory attendance repository for tests."""

    users: InMemoryUserRepository
    records: dict[tuple[int, int], AttendanceRecord] = field(default_factory=dict)

    def insert_records(self, records: list[AttendanceRecord]) -> None:
        for record in records:
            self.records.setdefault((record.session_id, record.student_id), record)

    def get_record(self, session_id: int, student_id: int) -> AttendanceRecord | None:
        return self.records.get((session_id, student_id))

    def update_status(
        self,
        session_id: int,
        student_id: int,
        status: AttendanceStatus,
        timestamp: datetime,
    ) -> None:
        current = self.records.get((session_id, student_id))
        if current is None:
            return
        self.records[(session_id, student_id)] = AttendanceRecord(
            session_id=session_id,
            student_id=student_id,
            status=status,
            timestamp=timestamp,
            date=current.date,
        )

    def list_records(
        self, session_id: int, status: AttendanceStatus | None = None
    ) -> list[AttendanceRecord]:
        return [
            record
            for record in self.records.values()
            if record.session_id == session_id
            and (status is None or record.status == status)
        ]

    def delete_record(self, session_id: int, student_id: int) -> None:
        self.records.pop((session_id, student_id), None)

    def list_rows_by_session(self, session_id: int) -> list[AttendanceRow]:
        return [
            self._join(record)
            for record in self.records.values()
            if record.session_id == session_id
        ]

    def list_rows_by_criteria(self, criteria: AttendanceFilter) -> list[AttendanceRow]:
        rows = []
        for record in self.records.values():
            user = self.users.get_user(record.student_id)
            if (
                user is not None
                and record.date == criteria.date
                and user.courses == criteria.courses
                and user.year_level == criteria.year_level
                and user.section == criteria.section
            ):
                rows.append(self._join(record))
        return rows

    def _join(self, record: AttendanceRecord) -> AttendanceRow:
        user = self.users.get_user(record.student_id)
        return AttendanceRow(
            session_id=record.session_id,
            student_id=record.student_id,
            full_name=user.full_name if user else "",
            year_level=user.year_level if user else None,
            section=user.section if user else None,
            courses=user.courses if user else None,
            status=record.status,
            date=record.date,
            timestamp=record.timestamp,
        )


@dataclass
class InMemoryReminderRepository(ReminderRepository):
    """In-memory reminder repository for tests."""

    reminders: list[ReminderRecord] = field(default_factory=list)
    failing_user_ids: set[int] = field(default_factory=set)

    def create_reminder(self, request: ReminderRequest) -> ReminderRecord:
        if request.user_id in self.failing_user_ids:
            raise StoreError("reminders table unavailable")
        reminder = ReminderRecord(
            id=len(self.reminders) + 1,
            title=request.title,
            description=request.description,
            user_id=request.user_id,
            reminder_date=request.reminder_date,
            is_completed=False,
        )
        self.reminders.append(reminder)
        return reminder

    def list_for_user(self, user_id: int) -> list[ReminderRecord]:
        return [
            reminder
            for reminder in reversed(self.reminders)
            if reminder.user_id == user_id
        ]

    def mark_completed(self, reminder_id: int) -> bool:
        for index, reminder in enumerate(self.reminders):
            if reminder.id == reminder_id:
                self.reminders[index] = ReminderRecord(
                    id=reminder.id,
                    title=reminder.title,
                    description=reminder.description,
                    user_id=reminder.user_id,
                    reminder_date=reminder.reminder_date,
                    is_completed=True,
                )
                return True
        return False

    def titled(self, title: str) -> list[ReminderRecord]:
        return [reminder for reminder in self.reminders if reminder.title == title]


@dataclass
class FakeTokenRenderer:
    """Renderer that records payloads instead of drawing QR codes."""

    payloads: list[str] = field(default_factory=list)

    def render(self, payload: str) -> str:
        self.payloads.append(payload)
        return f"qr:{payload}"


@dataclass
class FakePushClient:
    """Push client that records reminders."""

    pushed: list[ReminderRecord] = field(default_factory=list)
    fail: bool = False
    delay: float = 0.0

    async def push(self, reminder: ReminderRecord) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise RuntimeError("push gateway down")
        self.pushed.append(reminder)


def seed_school(repository: InMemoryUserRepository) -> InMemoryUserRepository:
    """Add a teacher, students in and out of scope, and their parents."""
    repository.add(UserRecord(id=TEACHER_ID, full_name="Ms. Cruz", role="teacher"))
    for student_id, name, section in (
        (STUDENT_ANA, "Ana Reyes", "A"),
        (STUDENT_BEN, "Ben Santos", "A"),
        (STUDENT_OTHER_SECTION, "Carl Lim", "B"),
    ):
        repository.add(
            UserRecord(
                id=student_id,
                full_name=name,
                role="student",
                courses="CS",
                section=section,
                year_level="3",
            )
        )
    repository.add(
        UserRecord(
            id=STUDENT_NO_GUARDIAN,
            full_name="Dana Uy",
            role="student",
            courses="IT",
            section="A",
            year_level="3",
        )
    )
    repository.add(
        UserRecord(
            id=PARENT_OF_ANA,
            full_name="Rosa Reyes",
            role="parent",
            linked_student_id=STUDENT_ANA,
        )
    )
    repository.add(
        UserRecord(
            id=PARENT_OF_BEN,
            full_name="Mario Santos",
            role="parent",
            linked_student_id=STUDENT_BEN,
        )
    )
    return repository


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="header.payload.signature",
        admin_token="admin-token",
    )


@pytest.fixture
def user_repository() -> InMemoryUserRepository:
    return seed_school(InMemoryUserRepository())


@pytest.fixture
def session_repository() -> InMemorySessionRepository:
    return InMemorySessionRepository()


@pytest.fixture
def attendance_repository(
    user_repository: InMemoryUserRepository,
) -> InMemoryAttendanceRepository:
    return InMemoryAttendanceRepository(users=user_repository)


@pytest.fixture
def reminder_repository() -> InMemoryReminderRepository:
    return InMemoryReminderRepository()


@pytest.fixture
def renderer() -> FakeTokenRenderer:
    return FakeTokenRenderer()


@pytest.fixture
def session_service(
    session_repository: InMemorySessionRepository,
    attendance_repository: InMemoryAttendanceRepository,
    user_repository: InMemoryUserRepository,
    reminder_repository: InMemoryReminderRepository,
    renderer: FakeTokenRenderer,
) -> SessionService:
    return SessionService(
        session_repository=session_repository,
        ledger=AttendanceLedger(attendance_repository),
        user_service=UserService(user_repository),
        dispatcher=NotificationDispatcher(reminder_repository),
        renderer=renderer,
        scheduler=DeferredJobScheduler(),
        background=BackgroundTaskRunner(),
        reference_point=REFERENCE_POINT,
        max_distance_km=0.1,
    )


@pytest.fixture
def container(
    settings: Settings,
    session_service: SessionService,
    attendance_repository: InMemoryAttendanceRepository,
    reminder_repository: InMemoryReminderRepository,
) -> AppContainer:
    async def close_resources() -> None:
        await session_service.scheduler.close()
        await session_service.background.drain()

    return AppContainer(
        settings=settings,
        user_service=session_service.user_service,
        session_service=session_service,
        report_service=AttendanceReportService(attendance_repository),
        reminder_service=ReminderService(reminder_repository),
        admin_service=AdminService(
            session_repository=session_service.session_repository,
            ledger=session_service.ledger,
        ),
        scheduler=session_service.scheduler,
        background=session_service.background,
        close_resources=close_resources,
    )

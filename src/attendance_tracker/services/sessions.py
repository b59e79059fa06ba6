"""Session lifecycle and check-in state machine."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, date, datetime, timedelta
from typing import Protocol

from attendance_tracker.domain.attendance import (
    AttendanceRecord,
    AttendanceRow,
    AttendanceStatus,
    CheckInResult,
)
from attendance_tracker.domain.errors import (
    NotEnrolledError,
    OutOfRangeError,
    SessionInactiveError,
    SessionNotFoundError,
    UnauthorizedError,
)
from attendance_tracker.domain.geo import GeoPoint
from attendance_tracker.domain.models import UserRecord
from attendance_tracker.domain.sessions import (
    CourseScope,
    CreatedSession,
    ScannableToken,
    SessionRecord,
    SessionSummary,
)
from attendance_tracker.services.attendance import AttendanceLedger
from attendance_tracker.services.background import BackgroundTaskRunner
from attendance_tracker.services.identifiers import SessionIdAllocator
from attendance_tracker.services.notifications import (
    NotificationDispatcher,
    absence_notice,
    presence_notice,
)
from attendance_tracker.services.proximity import within_range
from attendance_tracker.services.scheduler import DeferredJobScheduler
from attendance_tracker.services.tokens import (
    TokenRenderer,
    encode_token,
    parse_token_payload,
)
from attendance_tracker.services.users import UserService

logger = logging.getLogger(__name__)

DEFAULT_SESSION_DURATION = timedelta(minutes=10)
EXPIRY_SWEEP_KEY = "expiry-sweep"


class SessionRepository(Protocol):
    """Persistence interface for attendance sessions."""

    def session_exists(self, session_id: int) -> bool:
        """Return true when a session with the id exists."""

    def create_session(  # noqa: PLR0913
        self,
        session_id: int,
        name: str,
        session_date: date,
        teacher_id: int,
        created_at: datetime,
        expires_at: datetime,
    ) -> SessionRecord:
        """Insert an active session and return it."""

    def get_session(self, session_id: int) -> SessionRecord | None:
        """Return a session by id, if present."""

    def deactivate_session(self, session_id: int) -> bool:
        """Flip ``active`` to false; return true only if this call changed it."""

    def list_sessions(self, limit: int | None = None) -> list[SessionRecord]:
        """Return sessions, newest first."""

    def list_active_sessions(self) -> list[SessionRecord]:
        """Return every session still marked active."""


@dataclass
class SessionService:
    """Create sessions, admit check-ins and expire sessions once."""

    session_repository: SessionRepository
    ledger: AttendanceLedger
    user_service: UserService
    dispatcher: NotificationDispatcher
    renderer: TokenRenderer
    scheduler: DeferredJobScheduler
    background: BackgroundTaskRunner
    reference_point: GeoPoint
    max_distance_km: float
    session_duration: timedelta = DEFAULT_SESSION_DURATION
    id_allocator: SessionIdAllocator = field(default_factory=SessionIdAllocator)

    async def create_session(
        self,
        name: str,
        session_date: date,
        teacher_id: int,
        scope: CourseScope,
    ) -> CreatedSession:
        """Create an active session and return its id with the rendered QR code.

        Seeding the ledger and the expiry timer run after this returns.
        """
        if not self.user_service.is_teacher(teacher_id):
            raise UnauthorizedError("Only teachers can create sessions")

        created_at = datetime.now(tz=UTC)
        expires_at = created_at + self.session_duration
        session = self.id_allocator.allocate(
            exists=self.session_repository.session_exists,
            create=lambda session_id: self.session_repository.create_session(
                session_id=session_id,
                name=name,
                session_date=session_date,
                teacher_id=teacher_id,
                created_at=created_at,
                expires_at=expires_at,
            ),
        )
        token = ScannableToken(
            session_id=session.id,
            date=session.date,
            expires_at=session.expires_at,
        )
        qr_code = self.renderer.render(encode_token(token))
        logger.info(
            "Session created",
            extra={"session_id": session.id, "teacher_id": teacher_id},
        )

        self.background.spawn(
            self._seed_ledger(session, scope),
            description=f"seed-session-{session.id}",
        )
        self.schedule_expiry(session)
        return CreatedSession(
            session_id=session.id,
            qr_code=qr_code,
            expires_at=session.expires_at,
        )

    def schedule_expiry(self, session: SessionRecord) -> None:
        """Register the one-shot expiry timer for a session."""
        session_id = session.id

        async def expire_job() -> int:
            return await self.expire(session_id)

        self.scheduler.schedule_once(
            _expiry_key(session_id), session.expires_at, expire_job
        )

    async def expire(self, session_id: int) -> int:
        """Deactivate a session and notify guardians of absent students.

        Returns the number of notifications dispatched; a session that was
        already inactive yields 0 and sends nothing.
        """
        session = self.session_repository.get_session(session_id)
        if session is None:
            logger.warning(
                "Cannot expire unknown session", extra={"session_id": session_id}
            )
            return 0
        if not self.session_repository.deactivate_session(session_id):
            logger.info("Session already inactive", extra={"session_id": session_id})
            return 0

        absent = self.ledger.list_by_status(session_id, AttendanceStatus.ABSENT)
        notified = 0
        for record in absent:
            if await self._notify_absence(session, record):
                notified += 1
        logger.info(
            "Session expired",
            extra={
                "session_id": session_id,
                "absent": len(absent),
                "notified": notified,
            },
        )
        return notified

    async def check_in(
        self, token_payload: str, student_id: int, location: GeoPoint
    ) -> CheckInResult:
        """Mark a student present for the session named by the token."""
        payload = parse_token_payload(token_payload)
        session = self.session_repository.get_session(payload.session_id)
        if session is None:
            raise SessionInactiveError("Session does not exist or is inactive")
        if self.ledger.get(session.id, student_id) is None:
            raise NotEnrolledError("Attendance record not found")
        if not session.active:
            raise SessionInactiveError("Session does not exist or is inactive")
        if not within_range(location, self.reference_point, self.max_distance_km):
            raise OutOfRangeError("Student is not within the allowed proximity")

        checked_in_at = datetime.now(tz=UTC)
        self.ledger.set_status(
            session.id, student_id, AttendanceStatus.PRESENT, checked_in_at
        )
        notified = await self._notify_presence(session, student_id, checked_in_at)
        if notified is False:
            return CheckInResult(
                status=AttendanceStatus.PRESENT,
                guardian_notified=False,
                message="Attendance confirmed, but the guardian could not be notified",
            )
        return CheckInResult(
            status=AttendanceStatus.PRESENT,
            guardian_notified=bool(notified),
            message="Attendance confirmed",
        )

    def add_student(self, session_id: int, student_id: int) -> AttendanceRecord:
        """Add a student to a session regardless of its scope."""
        session = self._require_session(session_id)
        return self.ledger.enroll(session.id, student_id, session.date)

    def remove_student(self, session_id: int, student_id: int) -> None:
        """Remove a student from a session."""
        session = self._require_session(session_id)
        self.ledger.withdraw(session.id, student_id)

    def list_active_session_students(self, session_id: int) -> list[AttendanceRow]:
        """Return the roster of an active session."""
        session = self.session_repository.get_session(session_id)
        if session is None or not session.active:
            raise SessionInactiveError("No active session found with this ID")
        return self.ledger.roster(session_id)

    def list_session_names(self) -> list[SessionSummary]:
        """Return every session with its name, date and active flag."""
        return [
            SessionSummary(
                session_id=session.id,
                name=session.name,
                date=session.date,
                active=session.active,
            )
            for session in self.session_repository.list_sessions()
        ]

    async def end_session(self, session_id: int) -> int:
        """Expire a session now instead of waiting for its timer."""
        self._require_session(session_id)
        key = _expiry_key(session_id)
        if not self.scheduler.cancel(key):
            await self.scheduler.wait(key)
        return await self.expire(session_id)

    async def expire_overdue(self) -> int:
        """Expire every active session whose due time has passed."""
        now = datetime.now(tz=UTC)
        expired = 0
        for session in self.session_repository.list_active_sessions():
            if session.expires_at > now:
                continue
            key = _expiry_key(session.id)
            if self.scheduler.is_scheduled(key) and not self.scheduler.cancel(key):
                continue
            await self.expire(session.id)
            expired += 1
        if expired:
            logger.info("Expired overdue sessions", extra={"count": expired})
        return expired

    async def recover_pending_expirations(self) -> int:
        """Expire overdue sessions and re-arm timers for the rest."""
        expired = await self.expire_overdue()
        for session in self.session_repository.list_active_sessions():
            if not self.scheduler.is_scheduled(_expiry_key(session.id)):
                self.schedule_expiry(session)
        return expired

    def start_expiry_sweeps(self, interval_seconds: float) -> None:
        """Periodically expire sessions whose timers were lost."""
        self.scheduler.schedule_every(
            EXPIRY_SWEEP_KEY, interval_seconds, self.expire_overdue
        )

    async def _seed_ledger(self, session: SessionRecord, scope: CourseScope) -> None:
        """Seed the ledger off the event loop; the store calls are blocking."""
        seeded = await asyncio.to_thread(self._seed_scope, session, scope)
        logger.info(
            "Initial attendance records created",
            extra={"session_id": session.id, "students": seeded},
        )

    def _seed_scope(self, session: SessionRecord, scope: CourseScope) -> int:
        students = self.user_service.students_in_scope(scope)
        return self.ledger.seed(
            session.id, [student.id for student in students], session.date
        )

    async def _notify_absence(
        self, session: SessionRecord, record: AttendanceRecord
    ) -> bool:
        try:
            guardian = self.user_service.guardian_for(record.student_id)
            if guardian is None:
                return False
            student = self.user_service.get_user(record.student_id)
        except Exception:
            logger.exception(
                "Guardian lookup failed",
                extra={"session_id": session.id, "student_id": record.student_id},
            )
            return False
        return await self.dispatcher.dispatch(
            absence_notice(
                guardian_id=guardian.id,
                student_name=_display_name(student, record.student_id),
                session_name=session.name,
                session_date=session.date,
            )
        )

    async def _notify_presence(
        self, session: SessionRecord, student_id: int, checked_in_at: datetime
    ) -> bool | None:
        """Return None when the student has no guardian to notify."""
        try:
            guardian = self.user_service.guardian_for(student_id)
            if guardian is None:
                return None
            student = self.user_service.get_user(student_id)
        except Exception:
            logger.exception(
                "Guardian lookup failed",
                extra={"session_id": session.id, "student_id": student_id},
            )
            return False
        return await self.dispatcher.dispatch(
            presence_notice(
                guardian_id=guardian.id,
                student_name=_display_name(student, student_id),
                session_name=session.name,
                checked_in_at=checked_in_at,
            )
        )

    def _require_session(self, session_id: int) -> SessionRecord:
        session = self.session_repository.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        return session


def _expiry_key(session_id: int) -> str:
    return f"expire:{session_id}"


def _display_name(student: UserRecord | None, student_id: int) -> str:
    if student is None or not student.full_name:
        return f"Student {student_id}"
    return student.full_name

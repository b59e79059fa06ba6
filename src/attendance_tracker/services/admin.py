"""Admin service for reporting."""

from dataclasses import dataclass

from attendance_tracker.domain.admin import SessionOverview
from attendance_tracker.domain.attendance import AttendanceStatus
from attendance_tracker.services.attendance import AttendanceLedger
from attendance_tracker.services.sessions import SessionRepository


@dataclass
class AdminService:
    """Service for admin dashboards."""

    session_repository: SessionRepository
    ledger: AttendanceLedger

    def list_sessions(self, limit: int = 20) -> list[dict[str, object]]:
        """Return recent sessions with attendance counts."""
        overviews = []
        for session in self.session_repository.list_sessions(limit):
            records = self.ledger.list_by_session(session.id)
            present = sum(
                1 for record in records if record.status == AttendanceStatus.PRESENT
            )
            overviews.append(
                SessionOverview(
                    session_id=session.id,
                    name=session.name,
                    date=session.date,
                    teacher_id=session.teacher_id,
                    active=session.active,
                    expires_at=session.expires_at,
                    present=present,
                    absent=len(records) - present,
                )
            )
        return [_serialize_overview(overview) for overview in overviews]


def _serialize_overview(overview: SessionOverview) -> dict[str, object]:
    return {
        "session_id": overview.session_id,
        "name": overview.name,
        "date": overview.date.isoformat(),
        "teacher_id": overview.teacher_id,
        "active": overview.active,
        "expires_at": overview.expires_at.isoformat(),
        "present": overview.present,
        "absent": overview.absent,
    }

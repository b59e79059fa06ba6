"""Attendance API endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Request, status

from attendance_tracker.api.models import (
    AttendanceCriteriaRequest,
    CheckInRequest,
    CreateSessionRequest,
    EnrollmentRequest,
)
from attendance_tracker.domain.attendance import AttendanceFilter
from attendance_tracker.domain.geo import GeoPoint
from attendance_tracker.domain.sessions import CourseScope
from attendance_tracker.services.reports import serialize_row

if TYPE_CHECKING:
    from attendance_tracker.containers import AppContainer

router = APIRouter(prefix="/api/attendance", tags=["attendance"])


@router.post("/create-session")
async def create_session(
    payload: CreateSessionRequest, request: Request
) -> dict[str, object]:
    """Create a session and return its QR code."""
    container: AppContainer = request.app.state.container
    created = await container.session_service.create_session(
        name=payload.session_name,
        session_date=payload.date,
        teacher_id=payload.teacher_id,
        scope=CourseScope(
            courses=payload.courses,
            section=payload.section,
            year_level=payload.year_level,
        ),
    )
    return {
        "sessionId": created.session_id,
        "qrCode": created.qr_code,
        "expiresAt": created.expires_at.isoformat(),
    }


@router.post("/check-attendance")
async def check_attendance(
    payload: CheckInRequest, request: Request
) -> dict[str, object]:
    """Mark the scanning student present."""
    container: AppContainer = request.app.state.container
    result = await container.session_service.check_in(
        token_payload=payload.qr_data,
        student_id=payload.student_id,
        location=GeoPoint(latitude=payload.student_lat, longitude=payload.student_lon),
    )
    return {
        "message": result.message,
        "status": result.status.value,
        "guardianNotified": result.guardian_notified,
    }


@router.post("/get-attendance")
async def get_attendance(
    payload: AttendanceCriteriaRequest, request: Request
) -> dict[str, object]:
    """Return attendance for a course, year level and section on a date."""
    container: AppContainer = request.app.state.container
    rows = container.report_service.by_criteria(
        AttendanceFilter(
            courses=payload.courses,
            year_level=payload.year_level,
            section=payload.section,
            date=payload.date,
        )
    )
    return {"success": True, "data": [serialize_row(row) for row in rows]}


@router.get("/active-session-students/{session_id}")
async def active_session_students(
    session_id: int, request: Request
) -> dict[str, object]:
    """Return the roster of an active session."""
    container: AppContainer = request.app.state.container
    rows = container.session_service.list_active_session_students(session_id)
    return {"success": True, "data": [serialize_row(row) for row in rows]}


@router.get("/session/{session_id}")
async def attendance_by_session(
    session_id: int, request: Request
) -> dict[str, object]:
    """Return attendance recorded for a session."""
    container: AppContainer = request.app.state.container
    rows = container.report_service.by_session(session_id)
    return {"success": True, "data": [serialize_row(row) for row in rows]}


@router.get("/names")
async def session_names(request: Request) -> dict[str, object]:
    """Return every session's id, name, date and active flag."""
    container: AppContainer = request.app.state.container
    sessions = container.session_service.list_session_names()
    return {
        "success": True,
        "data": [
            {
                "sessionId": summary.session_id,
                "name": summary.name,
                "date": summary.date.isoformat(),
                "active": summary.active,
            }
            for summary in sessions
        ],
    }


@router.post("/session/{session_id}/students", status_code=status.HTTP_201_CREATED)
async def add_student(
    session_id: int, payload: EnrollmentRequest, request: Request
) -> dict[str, object]:
    """Add a student to a session."""
    container: AppContainer = request.app.state.container
    record = container.session_service.add_student(session_id, payload.student_id)
    return {
        "message": "Student added to session",
        "sessionId": record.session_id,
        "studentId": record.student_id,
        "status": record.status.value,
    }


@router.delete("/session/{session_id}/students/{student_id}")
async def remove_student(
    session_id: int, student_id: int, request: Request
) -> dict[str, object]:
    """Remove a student from a session."""
    container: AppContainer = request.app.state.container
    container.session_service.remove_student(session_id, student_id)
    return {"message": "Student removed from session"}

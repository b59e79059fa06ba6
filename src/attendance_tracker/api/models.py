"""Pydantic models for attendance API payloads."""

from datetime import date

from pydantic import BaseModel, Field


class CreateSessionRequest(BaseModel):
    """Payload for creating a session."""

    session_name: str = Field(alias="sessionName", min_length=1)
    date: date
    teacher_id: int = Field(alias="teacherId")
    courses: str
    section: str
    year_level: str


class CheckInRequest(BaseModel):
    """Payload submitted by a student scanning a session QR code."""

    qr_data: str = Field(alias="qrData")
    student_id: int = Field(alias="studentId")
    student_lat: float = Field(alias="studentLat", ge=-90.0, le=90.0)
    student_lon: float = Field(alias="studentLon", ge=-180.0, le=180.0)


class AttendanceCriteriaRequest(BaseModel):
    """Filter for attendance reports."""

    courses: str
    year_level: str
    section: str
    date: date


class EnrollmentRequest(BaseModel):
    """Payload for adding a student to a session."""

    student_id: int = Field(alias="studentId")

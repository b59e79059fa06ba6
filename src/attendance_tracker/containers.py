"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import timedelta

from supabase import create_client

from attendance_tracker.adapters.push_client import HttpxPushClient
from attendance_tracker.adapters.qr_token_renderer import QrTokenRenderer
from attendance_tracker.adapters.supabase_attendance_repository import (
    SupabaseAttendanceRepository,
)
from attendance_tracker.adapters.supabase_reminder_repository import (
    SupabaseReminderRepository,
)
from attendance_tracker.adapters.supabase_session_repository import (
    SupabaseSessionRepository,
)
from attendance_tracker.adapters.supabase_user_repository import SupabaseUserRepository
from attendance_tracker.config import Settings, parse_webhook_url
from attendance_tracker.domain.geo import GeoPoint
from attendance_tracker.services.admin import AdminService
from attendance_tracker.services.attendance import AttendanceLedger
from attendance_tracker.services.background import BackgroundTaskRunner
from attendance_tracker.services.notifications import NotificationDispatcher
from attendance_tracker.services.reminders import ReminderService
from attendance_tracker.services.reports import AttendanceReportService
from attendance_tracker.services.scheduler import DeferredJobScheduler
from attendance_tracker.services.sessions import SessionService
from attendance_tracker.services.users import UserService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    user_service: UserService
    session_service: SessionService
    report_service: AttendanceReportService
    reminder_service: ReminderService
    admin_service: AdminService
    scheduler: DeferredJobScheduler
    background: BackgroundTaskRunner
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    user_repository = SupabaseUserRepository(supabase_client)
    session_repository = SupabaseSessionRepository(supabase_client)
    attendance_repository = SupabaseAttendanceRepository(supabase_client)
    reminder_repository = SupabaseReminderRepository(supabase_client)

    webhook_url = parse_webhook_url(resolved_settings.notification_webhook_url)
    push_client = HttpxPushClient.create(webhook_url) if webhook_url else None
    dispatcher = NotificationDispatcher(
        reminder_repository=reminder_repository,
        push_client=push_client,
    )
    user_service = UserService(user_repository)
    ledger = AttendanceLedger(attendance_repository)
    scheduler = DeferredJobScheduler()
    background = BackgroundTaskRunner()
    session_service = SessionService(
        session_repository=session_repository,
        ledger=ledger,
        user_service=user_service,
        dispatcher=dispatcher,
        renderer=QrTokenRenderer(),
        scheduler=scheduler,
        background=background,
        reference_point=GeoPoint(
            latitude=resolved_settings.reference_latitude,
            longitude=resolved_settings.reference_longitude,
        ),
        max_distance_km=resolved_settings.max_distance_km,
        session_duration=timedelta(
            minutes=resolved_settings.session_duration_minutes
        ),
    )
    admin_service = AdminService(
        session_repository=session_repository,
        ledger=ledger,
    )

    async def close_resources() -> None:
        await scheduler.close()
        await background.drain()
        if push_client is not None:
            await push_client.close()

    return AppContainer(
        settings=resolved_settings,
        user_service=user_service,
        session_service=session_service,
        report_service=AttendanceReportService(attendance_repository),
        reminder_service=ReminderService(reminder_repository),
        admin_service=admin_service,
        scheduler=scheduler,
        background=background,
        close_resources=close_resources,
    )

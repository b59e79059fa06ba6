"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from attendance_tracker.api.admin import router as admin_router
from attendance_tracker.api.attendance import router as attendance_router
from attendance_tracker.api.reminders import router as reminders_router
from attendance_tracker.app_logging import configure_logging
from attendance_tracker.containers import AppContainer
from attendance_tracker.domain.errors import (
    AlreadyEnrolledError,
    AttendanceError,
    InvalidTokenError,
    NotEnrolledError,
    OutOfRangeError,
    SessionInactiveError,
    SessionNotFoundError,
    StoreError,
    UnauthorizedError,
)

_ERROR_STATUS: dict[type[AttendanceError], int] = {
    UnauthorizedError: status.HTTP_403_FORBIDDEN,
    InvalidTokenError: status.HTTP_400_BAD_REQUEST,
    OutOfRangeError: status.HTTP_400_BAD_REQUEST,
    SessionInactiveError: status.HTTP_404_NOT_FOUND,
    SessionNotFoundError: status.HTTP_404_NOT_FOUND,
    NotEnrolledError: status.HTTP_404_NOT_FOUND,
    AlreadyEnrolledError: status.HTTP_409_CONFLICT,
}


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        state_container: AppContainer = app.state.container
        session_service = state_container.session_service
        try:
            await session_service.recover_pending_expirations()
        except Exception:
            logger.exception("Failed to recover pending session expirations")
        session_service.start_expiry_sweeps(
            state_container.settings.expiry_sweep_interval_seconds
        )
        yield
        await state_container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(admin_router)
    app.include_router(attendance_router)
    app.include_router(reminders_router)

    @app.exception_handler(AttendanceError)
    async def attendance_error_handler(
        request: Request, exc: AttendanceError
    ) -> JSONResponse:
        if isinstance(exc, StoreError):
            logger.error(
                "Store failure", exc_info=exc, extra={"path": request.url.path}
            )
            return _server_error(container, exc)
        return JSONResponse(
            status_code=_status_for(exc),
            content={"error": str(exc)},
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.error(
            "Unhandled error", exc_info=exc, extra={"path": request.url.path}
        )
        return _server_error(container, exc)

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app


def _status_for(exc: AttendanceError) -> int:
    for error_type in type(exc).__mro__:
        code = _ERROR_STATUS.get(error_type)
        if code is not None:
            return code
    return status.HTTP_400_BAD_REQUEST


def _server_error(container: AppContainer, exc: Exception) -> JSONResponse:
    """Return a generic 500 response with local debug info."""
    content: dict[str, str] = {
        "error": "Internal server error. Please try again later."
    }
    if container.settings.environment == "local":
        content["debug"] = f"{type(exc).__name__}: {exc}".strip()
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=content
    )

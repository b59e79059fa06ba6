"""ASGI entrypoint for the attendance API.

Serve with ``uvicorn attendance_tracker.api.asgi:app``.
"""

from attendance_tracker.api.app import create_app
from attendance_tracker.containers import build_container

app = create_app(build_container())

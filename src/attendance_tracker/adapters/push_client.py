"""Webhook client that forwards reminders to a push gateway."""

from dataclasses import dataclass
from typing import Protocol

import httpx

from attendance_tracker.domain.reminders import ReminderRecord


class PushClient(Protocol):
    """Interface for forwarding reminders to devices."""

    async def push(self, reminder: ReminderRecord) -> None:
        """Deliver a reminder notification."""


@dataclass
class HttpxPushClient(PushClient):
    """Push client implemented with httpx."""

    webhook_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, webhook_url: str) -> "HttpxPushClient":
        """Create a push client with a managed httpx session."""
        return cls(webhook_url=webhook_url, http_client=httpx.AsyncClient())

    async def push(self, reminder: ReminderRecord) -> None:
        """POST the reminder to the configured webhook."""
        payload: dict[str, object] = {
            "reminder_id": reminder.id,
            "user_id": reminder.user_id,
            "title": reminder.title,
            "body": reminder.description,
            "sent_at": reminder.reminder_date.isoformat(),
        }
        response = await self.http_client.post(
            self.webhook_url, json=payload, timeout=10
        )
        response.raise_for_status()

    async def close(self) -> None:
        """Close the underlying HTTP client session."""
        await self.http_client.aclose()

"""Scannable token encoding and check-in payload parsing."""

import json
from dataclasses import dataclass
from typing import Protocol

from attendance_tracker.domain.errors import InvalidTokenError
from attendance_tracker.domain.sessions import ScannableToken
from attendance_tracker.services.identifiers import SESSION_ID_MAX, SESSION_ID_MIN


class TokenRenderer(Protocol):
    """Render token text into a scannable artifact."""

    def render(self, payload: str) -> str:
        """Return a renderable artifact (e.g. an image data URL)."""


@dataclass(frozen=True)
class StructuredToken:
    """Check-in payload carrying the JSON token."""

    session_id: int
    date: str | None
    expires_at: str | None


@dataclass(frozen=True)
class BareSessionId:
    """Check-in payload that is only the decimal session id."""

    session_id: int


TokenPayload = StructuredToken | BareSessionId


def encode_token(token: ScannableToken) -> str:
    """Serialize a token into the text embedded in the QR code."""
    return json.dumps(
        {
            "session_id": token.session_id,
            "date": token.date.isoformat(),
            "expiresAt": token.expires_at.isoformat(),
        }
    )


def parse_token_payload(raw: str) -> TokenPayload:
    """Parse either a JSON token or a bare session id."""
    text = raw.strip()
    if text.startswith("{"):
        return _parse_structured(text)
    if _is_decimal(text):
        return BareSessionId(session_id=_decimal_id(text))
    raise InvalidTokenError("Invalid QR code format")


def _parse_structured(text: str) -> StructuredToken:
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise InvalidTokenError("Invalid QR code format") from exc
    if not isinstance(data, dict):
        raise InvalidTokenError("Invalid QR code format")

    session_id = _coerce_session_id(data.get("session_id"))
    date = data.get("date")
    expires_at = data.get("expiresAt")
    return StructuredToken(
        session_id=session_id,
        date=str(date) if date is not None else None,
        expires_at=str(expires_at) if expires_at is not None else None,
    )


def _coerce_session_id(value: object) -> int:
    if isinstance(value, bool):
        raise InvalidTokenError("Invalid session id in QR code")
    if isinstance(value, int):
        return _in_range(value)
    if isinstance(value, str) and _is_decimal(value.strip()):
        return _decimal_id(value.strip())
    raise InvalidTokenError("Invalid session id in QR code")


def _decimal_id(text: str) -> int:
    if len(text) > len(str(SESSION_ID_MAX)):
        raise InvalidTokenError("Invalid session id in QR code")
    return _in_range(int(text))


def _in_range(session_id: int) -> int:
    if not SESSION_ID_MIN <= session_id <= SESSION_ID_MAX:
        raise InvalidTokenError("Invalid session id in QR code")
    return session_id


def _is_decimal(text: str) -> bool:
    return text.isascii() and text.isdigit()

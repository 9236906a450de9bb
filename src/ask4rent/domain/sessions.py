"""Domain models for client sessions."""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import StrEnum


@dataclass(frozen=True)
class SessionRecord:
    """An opaque session token with its activity timestamps."""

    token: str
    created_at: datetime
    last_activity_at: datetime

    def is_valid(self, now: datetime, ttl: timedelta) -> bool:
        """Return whether the session is still inside its sliding window."""
        return bool(self.token) and now - self.last_activity_at < ttl

    def touched(self, now: datetime) -> "SessionRecord":
        return replace(self, last_activity_at=now)


@dataclass(frozen=True)
class AuthenticatedUser:
    """A signed-in user whose bearer token scopes backend calls."""

    access_token: str
    email: str | None = None
    name: str | None = None


class SessionStatus(StrEnum):
    """Session state as seen by the UI."""

    INITIALIZING = "initializing"
    VALID = "valid"
    EXPIRED = "expired"


class ActivityEvent(StrEnum):
    """User activity kinds reported to the session manager."""

    CLICK = "click"
    POINTER = "pointer"
    SCROLL = "scroll"
    TOUCH = "touch"
    KEYDOWN = "keydown"
    INPUT = "input"


QUALIFYING_ACTIVITY = frozenset(
    {
        ActivityEvent.CLICK,
        ActivityEvent.POINTER,
        ActivityEvent.SCROLL,
        ActivityEvent.TOUCH,
    }
)


class ResetReason(StrEnum):
    """Why a session was replaced."""

    LOGOUT = "logout"
    RENEWAL_FAILED = "renewal_failed"
    REJECTED = "rejected"


@dataclass(frozen=True)
class SessionReset:
    """Published whenever the active session token is replaced."""

    reason: ResetReason
    previous_token: str | None
    session: SessionRecord | None

"""Persistence of the session and signed-in user records."""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from ask4rent.domain.sessions import AuthenticatedUser, SessionRecord
from ask4rent.services.storage import KeyValueStore

SESSION_KEY = "ask4rent_session"
USER_KEY = "ask4rent_user"

_logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class SessionStore:
    """Sole reader and writer of the persisted session records."""

    store: KeyValueStore
    ttl: timedelta = timedelta(minutes=5)
    clock: Callable[[], datetime] = field(default=utc_now)

    def create(self, token: str) -> SessionRecord:
        """Persist a freshly issued token and return its record."""
        now = self.clock()
        record = SessionRecord(token=token, created_at=now, last_activity_at=now)
        self._write_session(record)
        return record

    def read(self) -> SessionRecord | None:
        """Return the stored session if it is still valid.

        Expired or unreadable records are removed.
        """
        raw = self.store.get(SESSION_KEY)
        if raw is None:
            return None
        try:
            record = _decode_session(raw)
        except (ValueError, TypeError, KeyError) as exc:
            _logger.warning("Discarding unreadable session record: %s", exc)
            self.store.delete(SESSION_KEY)
            return None
        if not record.is_valid(self.clock(), self.ttl):
            self.store.delete(SESSION_KEY)
            return None
        return record

    def touch(self) -> SessionRecord | None:
        """Slide the activity timestamp of a still-valid session forward."""
        record = self.read()
        if record is None:
            return None
        touched = record.touched(self.clock())
        self._write_session(touched)
        return touched

    def clear(self) -> None:
        """Remove the stored session."""
        self.store.delete(SESSION_KEY)

    def read_user(self) -> AuthenticatedUser | None:
        """Return the signed-in user record, if any."""
        raw = self.store.get(USER_KEY)
        if raw is None:
            return None
        try:
            data = json.loads(raw)
            return AuthenticatedUser(
                access_token=str(data["access_token"]),
                email=data.get("email"),
                name=data.get("name"),
            )
        except (ValueError, TypeError, KeyError) as exc:
            _logger.warning("Discarding unreadable user record: %s", exc)
            self.store.delete(USER_KEY)
            return None

    def save_user(self, user: AuthenticatedUser) -> None:
        self.store.set(
            USER_KEY,
            json.dumps(
                {"access_token": user.access_token, "email": user.email, "name": user.name}
            ),
        )

    def clear_user(self) -> None:
        self.store.delete(USER_KEY)

    def _write_session(self, record: SessionRecord) -> None:
        self.store.set(
            SESSION_KEY,
            json.dumps(
                {
                    "sessionId": record.token,
                    "timestamp": _to_millis(record.created_at),
                    "lastActivity": _to_millis(record.last_activity_at),
                }
            ),
        )


def _decode_session(raw: str) -> SessionRecord:
    data = json.loads(raw)
    token = data["sessionId"]
    if not isinstance(token, str) or not token:
        raise ValueError("missing session id")
    last_activity = _from_millis(data["lastActivity"])
    created = _from_millis(data.get("timestamp", data["lastActivity"]))
    return SessionRecord(token=token, created_at=created, last_activity_at=last_activity)


def _to_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def _from_millis(value: object) -> datetime:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise TypeError("timestamp is not a number")
    return datetime.fromtimestamp(value / 1000, tz=UTC)

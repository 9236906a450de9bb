"""Session lifecycle: creation, activity-driven renewal and expiry."""

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Protocol

import httpx

from ask4rent.domain.sessions import (
    QUALIFYING_ACTIVITY,
    ActivityEvent,
    AuthenticatedUser,
    ResetReason,
    SessionRecord,
    SessionReset,
    SessionStatus,
)
from ask4rent.errors import SessionCreationError
from ask4rent.services.scheduling import ScheduledTask, schedule_every, schedule_once
from ask4rent.services.session_store import SessionStore

_logger = logging.getLogger(__name__)

SessionResetListener = Callable[[SessionReset], Awaitable[None] | None]


class SessionClient(Protocol):
    """Interface for the backend session service."""

    async def create_session(self) -> str:
        """Issue a new session token."""

    async def renew_session(self, token: str) -> bool:
        """Extend a token's lifetime; False when the backend no longer knows it."""


@dataclass
class SessionLifecycleManager:
    """Owns the session token and every timer that touches it."""

    store: SessionStore
    client: SessionClient
    renew_debounce_seconds: float = 1.0
    sweep_interval_seconds: float = 60.0
    activity_write_interval_seconds: float = 1.0
    _session: SessionRecord | None = field(default=None, init=False)
    _status: SessionStatus = field(default=SessionStatus.INITIALIZING, init=False)
    _renew_timer: ScheduledTask | None = field(default=None, init=False)
    _renewal: ScheduledTask | None = field(default=None, init=False)
    _sweep_timer: ScheduledTask | None = field(default=None, init=False)
    _listeners: list[SessionResetListener] = field(default_factory=list, init=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False)
    _closed: bool = field(default=False, init=False)

    @property
    def session(self) -> SessionRecord | None:
        return self._session

    @property
    def status(self) -> SessionStatus:
        return self._status

    @property
    def is_valid(self) -> bool:
        return self._status is SessionStatus.VALID and self._session is not None

    @property
    def authenticated_user(self) -> AuthenticatedUser | None:
        return self.store.read_user()

    async def start(self) -> SessionRecord:
        """Establish a session and begin the periodic validity sweep."""
        session = await self.ensure_session()
        if self._sweep_timer is None or self._sweep_timer.done:
            self._sweep_timer = schedule_every(
                "session-sweep", self.sweep_interval_seconds, self._sweep
            )
        return session

    async def ensure_session(self) -> SessionRecord:
        """Return a valid session, restoring a persisted one or creating a new one.

        Raises SessionCreationError when a new token is needed and the session
        service cannot be reached.
        """
        async with self._lock:
            self._closed = False
            stored = self.store.read()
            if stored is not None:
                if self._session is None or self._session.token != stored.token:
                    _logger.info("Restored session %s", stored.token)
                self._session = stored
                self._status = SessionStatus.VALID
                return stored
            return await self._create_locked()

    def touch(self, event: ActivityEvent = ActivityEvent.CLICK) -> None:
        """Record qualifying user activity and schedule a debounced renewal.

        Must be called from the event loop thread. Typing events are ignored so
        text entry is never interrupted by background calls.
        """
        if event not in QUALIFYING_ACTIVITY or not self.is_valid:
            return
        self._record_activity()
        if self._renew_timer is not None:
            self._renew_timer.cancel()
        self._renew_timer = schedule_once(
            "session-renew", self.renew_debounce_seconds, self._debounced_renew
        )

    def mark_hidden(self) -> None:
        """Record activity when the client is backgrounded, without a renewal call."""
        if self.is_valid:
            self._record_activity(throttle=False)

    async def renew(self) -> bool:
        """Extend the current session with the backend.

        On failure the token is discarded and replaced; failures are never
        raised to the caller. A result for a token that was replaced or torn
        down while the call was in flight is dropped.
        """
        if self._closed:
            return False
        current = self._session
        if current is None:
            await self._replace(ResetReason.RENEWAL_FAILED, previous=None)
            return False
        try:
            accepted = await self.client.renew_session(current.token)
        except httpx.HTTPError as exc:
            _logger.warning("Session renewal failed for %s: %s", current.token, exc)
            accepted = False
        if not self._is_current(current.token):
            _logger.info("Dropping renewal result for replaced session %s", current.token)
            return False
        if accepted:
            touched = self.store.touch()
            if touched is not None:
                self._session = touched
                self._status = SessionStatus.VALID
                _logger.info("Session renewed: %s", current.token)
                return True
            _logger.info("Session %s expired locally before renewal completed", current.token)
        await self._replace(ResetReason.RENEWAL_FAILED, previous=current.token)
        return False

    async def recreate(self, reason: ResetReason = ResetReason.REJECTED) -> SessionRecord:
        """Discard the current token and create a fresh one."""
        previous = self._session.token if self._session else None
        async with self._lock:
            self.store.clear()
            self._session = None
            self._status = SessionStatus.INITIALIZING
            session = await self._create_locked()
        await self._publish(SessionReset(reason=reason, previous_token=previous, session=session))
        return session

    async def invalidate(self) -> SessionReset:
        """Log out: drop the token and user, then start a fresh anonymous session."""
        self._cancel_renewal()
        previous = self._session.token if self._session else None
        async with self._lock:
            self.store.clear()
            self.store.clear_user()
            self._session = None
            self._status = SessionStatus.INITIALIZING
            try:
                session = await self._create_locked()
            except SessionCreationError:
                _logger.warning("No replacement session after logout")
                session = None
        event = SessionReset(reason=ResetReason.LOGOUT, previous_token=previous, session=session)
        await self._publish(event)
        return event

    def sign_in(self, user: AuthenticatedUser) -> None:
        """Persist the signed-in user so backend calls carry its credential."""
        self.store.save_user(user)

    def check_validity(self) -> bool:
        """Flip to expired when the persisted session lapsed without renewal."""
        if self._status is not SessionStatus.VALID:
            return False
        stored = self.store.read()
        if stored is None or self._session is None or stored.token != self._session.token:
            _logger.info("Session expired, clearing state")
            self._session = None
            self._status = SessionStatus.EXPIRED
            self._cancel_renewal()
            return False
        return True

    def subscribe(self, listener: SessionResetListener) -> Callable[[], None]:
        """Register a session-reset listener; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def close(self, *, discard_session: bool = True) -> None:
        """Cancel both timers and any in-flight renewal; by default drop the token."""
        self._closed = True
        self._cancel_renewal()
        if self._sweep_timer is not None:
            self._sweep_timer.cancel()
            self._sweep_timer = None
        if discard_session:
            self.store.clear()
            self._session = None
            self._status = SessionStatus.EXPIRED

    async def _create_locked(self) -> SessionRecord:
        try:
            token = await self.client.create_session()
        except (httpx.HTTPError, ValueError) as exc:
            self._status = SessionStatus.EXPIRED
            _logger.warning("Failed to create session: %s", exc)
            raise SessionCreationError(str(exc)) from exc
        record = self.store.create(token)
        self._session = record
        self._status = SessionStatus.VALID
        _logger.info("Created new session: %s", token)
        return record

    async def _replace(self, reason: ResetReason, previous: str | None) -> None:
        async with self._lock:
            if self._closed or not self._is_current(previous):
                return
            self.store.clear()
            self._session = None
            self._status = SessionStatus.INITIALIZING
            try:
                session = await self._create_locked()
            except SessionCreationError:
                _logger.warning("Session replacement failed; will retry on next request")
                return
        await self._publish(SessionReset(reason=reason, previous_token=previous, session=session))

    async def _debounced_renew(self) -> None:
        handle, self._renew_timer = self._renew_timer, None
        self._renewal = handle
        try:
            await self.renew()
        finally:
            if self._renewal is handle:
                self._renewal = None

    async def _sweep(self) -> None:
        self.check_validity()

    def _cancel_renewal(self) -> None:
        for handle in (self._renew_timer, self._renewal):
            if handle is not None:
                handle.cancel()
        self._renew_timer = None
        self._renewal = None

    def _is_current(self, token: str | None) -> bool:
        active = self._session.token if self._session else None
        return active == token

    def _record_activity(self, *, throttle: bool = True) -> None:
        # Activity inside the write interval is already covered by the last write.
        session = self._session
        if throttle and session is not None:
            elapsed = self.store.clock() - session.last_activity_at
            if elapsed < timedelta(seconds=self.activity_write_interval_seconds):
                return
        touched = self.store.touch()
        if touched is not None:
            self._session = touched

    async def _publish(self, event: SessionReset) -> None:
        for listener in list(self._listeners):
            try:
                result = listener(event)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                _logger.exception("Session reset listener failed")

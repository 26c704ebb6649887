"""Asyncio driver that runs tag sessions against a transport."""

from __future__ import annotations

import asyncio
import logging
from contextlib import suppress
from typing import Any, Callable, Optional

from spark.domain.identity.models import InterestSet
from spark.domain.proximity.exceptions import TransportError, UserCancelledError
from spark.domain.proximity.models import (
    Action,
    CapabilityQueryFailed,
    CapabilityReported,
    ConnectFailed,
    ConnectSucceeded,
    DiscoveryFailed,
    FailureReason,
    Invalidate,
    MessageMissing,
    MessageRead,
    ReadFailed,
    StartRequested,
    TagCapability,
    TagsDetected,
    TimedOut,
    Transition,
    UserCancelled,
    WriteFailed,
    WriteSucceeded,
)
from spark.domain.proximity.session import SessionResult, TagSession
from spark.domain.proximity.transport import TagTransport
from spark.obs import metrics as obs_metrics
from spark.settings import settings

logger = logging.getLogger(__name__)

TransitionListener = Callable[[Transition], None]


class TagSessionRunner:
    """Owns the transport for one device context.

    Only one session runs at a time; starting another invalidates the
    previous one first. Each step performs exactly one transport call and the
    transport is released before a result is returned. Session failures come
    back as ``SessionResult`` values, never as exceptions.
    """

    def __init__(
        self,
        transport: TagTransport,
        *,
        retry_delay: Optional[float] = None,
        timeout: Optional[float] = None,
        listener: Optional[TransitionListener] = None,
    ) -> None:
        self._transport = transport
        self._retry_delay = settings.tag_retry_delay_seconds if retry_delay is None else retry_delay
        self._timeout = settings.tag_session_timeout_seconds if timeout is None else timeout
        self._listener = listener
        self._session: Optional[TagSession] = None
        self._task: Optional[asyncio.Task] = None
        self._start_lock = asyncio.Lock()

    @property
    def active_session(self) -> Optional[TagSession]:
        if self._session is None or self._session.terminal:
            return None
        return self._session

    async def read(self) -> SessionResult:
        return await self.run(TagSession())

    async def write(self, username: str, interests: InterestSet) -> SessionResult:
        return await self.run(TagSession.for_write(username, interests))

    async def run(self, session: TagSession) -> SessionResult:
        # Overlapping starts queue here so each one invalidates its predecessor.
        async with self._start_lock:
            await self.invalidate()
            task = asyncio.create_task(self._drive(session), name=f"tag-session:{session.mode.value}")
            self._session = session
            self._task = task
        try:
            return await task
        except asyncio.CancelledError:
            if task.cancelled() and session.terminal:
                # Invalidated before the first transport step was scheduled.
                await self._release()
                return self._finish(session)
            # The caller was cancelled; the session ends as cancelled too.
            started = len(session.history) > 1
            if not session.terminal:
                self._emit(session.handle_event(Invalidate()))
            if not started:
                await self._release()
            self._finish(session)
            raise
        finally:
            if self._task is task:
                self._task = None
                self._session = None

    async def invalidate(self) -> None:
        """Cancel the active session, if any, and wait for it to release."""
        session, task = self._session, self._task
        if session is None or task is None or task.done():
            return
        if not session.terminal:
            self._emit(session.handle_event(Invalidate()))
            task.cancel()
        with suppress(asyncio.CancelledError):
            await task

    async def _drive(self, session: TagSession) -> SessionResult:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self._timeout
        transition = session.handle_event(StartRequested(available=bool(self._transport.available)))
        self._emit(transition)
        try:
            while not transition.terminal:
                event = await self._perform(session, transition.action, deadline)
                if session.terminal:
                    break
                transition = session.handle_event(event)
                self._emit(transition)
        except asyncio.CancelledError:
            if not session.terminal:
                raise
        finally:
            await self._release()
        return self._finish(session)

    async def _perform(self, session: TagSession, action: Action, deadline: float) -> Any:
        try:
            if action in (Action.DISCOVER, Action.RETRY_DISCOVERY):
                if action is Action.RETRY_DISCOVERY:
                    obs_metrics.inc_multi_tag_retry()
                    await asyncio.sleep(self._retry_delay)
                return await self._discover(deadline)
            if action is Action.CONNECT:
                try:
                    await self._transport.connect(session.tag)
                except TransportError as exc:
                    return ConnectFailed(str(exc))
                return ConnectSucceeded()
            if action is Action.QUERY_CAPABILITY:
                try:
                    capability = TagCapability(await self._transport.query_capability(session.tag))
                except ValueError as exc:
                    return CapabilityQueryFailed(f"unknown capability: {exc}")
                except TransportError as exc:
                    return CapabilityQueryFailed(str(exc))
                return CapabilityReported(capability)
            if action is Action.READ:
                try:
                    records = await self._transport.read_message(session.tag)
                except TransportError as exc:
                    return ReadFailed(str(exc))
                if records is None:
                    return MessageMissing()
                return MessageRead(tuple(records))
            if action is Action.WRITE:
                try:
                    await self._transport.write_message(session.tag, session.payload or b"")
                except TransportError as exc:
                    return WriteFailed(str(exc))
                return WriteSucceeded()
        except UserCancelledError:
            return UserCancelled()
        raise RuntimeError(f"no transport step for action {action.value}")

    async def _discover(self, deadline: float) -> Any:
        remaining = deadline - asyncio.get_running_loop().time()
        if remaining <= 0:
            return TimedOut()
        try:
            tags = await asyncio.wait_for(self._transport.discover(), timeout=remaining)
        except asyncio.TimeoutError:
            return TimedOut()
        except UserCancelledError:
            return UserCancelled()
        except TransportError as exc:
            return DiscoveryFailed(str(exc))
        return TagsDetected(tuple(tags))

    async def _release(self) -> None:
        try:
            await self._transport.release()
        except TransportError:
            logger.warning("tag transport release failed", exc_info=True)

    def _emit(self, transition: Transition) -> None:
        if transition.advisory:
            logger.info(transition.advisory)
        if self._listener is not None:
            self._listener(transition)

    def _finish(self, session: TagSession) -> SessionResult:
        result = session.result
        outcome = result.reason.value if result.reason else "completed"
        obs_metrics.inc_tag_session(result.mode.value, outcome)
        if result.ok or result.reason in (FailureReason.USER_CANCELLED, FailureReason.CANCELLED):
            logger.info("tag session finished", extra={"mode": result.mode.value, "outcome": outcome})
        else:
            logger.warning(
                "tag session failed",
                extra={"mode": result.mode.value, "outcome": outcome, "detail": result.detail},
            )
        return result

"""Finite-state machine for a single tag read or write session.

``TagSession`` performs no I/O. A driver feeds it events describing what the
transport reported and gets back a ``Transition`` naming the next action.
This keeps the flow testable with synthetic events.

Flow::

	IDLE -> SESSION_ACTIVE -> TAG_DETECTED -> CONNECTED -> STATUS_QUERIED
	     -> READING | WRITING -> COMPLETED | FAILED

More than one tag in range is recoverable: the session stays in
SESSION_ACTIVE, emits an advisory and asks for a delayed re-poll.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Type

from spark.domain.identity.models import InterestSet
from spark.domain.proximity import codec
from spark.domain.proximity.exceptions import DecodeError, InvalidTransition
from spark.domain.proximity.models import (
	MULTIPLE_TAGS_ADVISORY,
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
	SessionMode,
	SessionState,
	StartRequested,
	TagCapability,
	TagsDetected,
	TimedOut,
	Transition,
	UserCancelled,
	WriteFailed,
	WriteSucceeded,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionResult:
	mode: SessionMode
	state: SessionState
	reason: Optional[FailureReason] = None
	detail: Optional[str] = None
	username: Optional[str] = None
	interests: Optional[InterestSet] = None

	@property
	def ok(self) -> bool:
		return self.state is SessionState.COMPLETED

	@property
	def written(self) -> bool:
		return self.ok and self.mode is SessionMode.WRITE


class TagSession:
	def __init__(self, payload: Optional[bytes] = None) -> None:
		self.payload = payload
		self.mode = SessionMode.WRITE if payload is not None else SessionMode.READ
		self.state = SessionState.IDLE
		self.tag: Any = None
		self.history: List[SessionState] = [SessionState.IDLE]
		self.reason: Optional[FailureReason] = None
		self.detail: Optional[str] = None
		self.username: Optional[str] = None
		self.interests: Optional[InterestSet] = None
		self._handlers: Dict[SessionState, Dict[Type[Any], Callable[[Any], Transition]]] = {
			SessionState.IDLE: {StartRequested: self._on_start},
			SessionState.SESSION_ACTIVE: {
				TagsDetected: self._on_tags,
				DiscoveryFailed: self._on_discovery_failed,
			},
			SessionState.TAG_DETECTED: {
				ConnectSucceeded: self._on_connected,
				ConnectFailed: self._on_connect_failed,
			},
			SessionState.CONNECTED: {
				CapabilityReported: self._on_capability,
				CapabilityQueryFailed: self._on_query_failed,
			},
			SessionState.WRITING: {
				WriteSucceeded: self._on_write_ok,
				WriteFailed: self._on_write_failed,
			},
			SessionState.READING: {
				MessageRead: self._on_message,
				MessageMissing: self._on_message_missing,
				ReadFailed: self._on_read_failed,
			},
		}

	@classmethod
	def for_write(cls, username: str, interests: InterestSet) -> "TagSession":
		return cls(payload=codec.encode(username, interests))

	@property
	def terminal(self) -> bool:
		return self.state.terminal

	@property
	def result(self) -> SessionResult:
		return SessionResult(
			mode=self.mode,
			state=self.state,
			reason=self.reason,
			detail=self.detail,
			username=self.username,
			interests=self.interests,
		)

	def handle_event(self, event: Any) -> Transition:
		if self.terminal:
			if isinstance(event, Invalidate):
				return Transition(previous=self.state, state=self.state)
			raise InvalidTransition(f"{type(event).__name__} after {self.state.value}")
		if isinstance(event, Invalidate):
			return self._fail(FailureReason.CANCELLED)
		if isinstance(event, UserCancelled):
			logger.info("tag session cancelled by user", extra={"mode": self.mode.value})
			return self._fail(FailureReason.USER_CANCELLED)
		if isinstance(event, TimedOut):
			return self._fail(FailureReason.TIMEOUT)
		handler = self._handlers.get(self.state, {}).get(type(event))
		if handler is None:
			raise InvalidTransition(f"{type(event).__name__} in {self.state.value}")
		return handler(event)

	# --- helpers ---

	def _move(self, state: SessionState, action: Action = Action.NONE, advisory: Optional[str] = None) -> Transition:
		previous = self.state
		self.state = state
		if self.history[-1] is not state:
			self.history.append(state)
		return Transition(previous=previous, state=state, action=action, advisory=advisory)

	def _fail(self, reason: FailureReason, detail: Optional[str] = None) -> Transition:
		previous = self.state
		self.state = SessionState.FAILED
		self.history.append(SessionState.FAILED)
		self.reason = reason
		self.detail = detail or None
		return Transition(
			previous=previous,
			state=SessionState.FAILED,
			action=Action.RELEASE,
			reason=reason,
			detail=self.detail,
		)

	def _complete(self) -> Transition:
		previous = self.state
		self.state = SessionState.COMPLETED
		self.history.append(SessionState.COMPLETED)
		return Transition(previous=previous, state=SessionState.COMPLETED, action=Action.RELEASE)

	# --- handlers ---

	def _on_start(self, event: StartRequested) -> Transition:
		if not event.available:
			return self._fail(FailureReason.UNSUPPORTED_HARDWARE)
		return self._move(SessionState.SESSION_ACTIVE, Action.DISCOVER)

	def _on_tags(self, event: TagsDetected) -> Transition:
		tags = list(event.tags)
		if len(tags) > 1:
			return self._move(SessionState.SESSION_ACTIVE, Action.RETRY_DISCOVERY, MULTIPLE_TAGS_ADVISORY)
		if not tags:
			return self._fail(FailureReason.NO_TAG)
		self.tag = tags[0]
		return self._move(SessionState.TAG_DETECTED, Action.CONNECT)

	def _on_discovery_failed(self, event: DiscoveryFailed) -> Transition:
		return self._fail(FailureReason.DISCOVERY_ERROR, event.error)

	def _on_connected(self, event: ConnectSucceeded) -> Transition:
		return self._move(SessionState.CONNECTED, Action.QUERY_CAPABILITY)

	def _on_connect_failed(self, event: ConnectFailed) -> Transition:
		return self._fail(FailureReason.CONNECT_ERROR, event.error)

	def _on_query_failed(self, event: CapabilityQueryFailed) -> Transition:
		return self._fail(FailureReason.QUERY_ERROR, event.error)

	def _on_capability(self, event: CapabilityReported) -> Transition:
		previous = self.state
		self.state = SessionState.STATUS_QUERIED
		self.history.append(SessionState.STATUS_QUERIED)
		capability = TagCapability(event.capability)
		if capability is TagCapability.NOT_SUPPORTED:
			transition = self._fail(FailureReason.INCOMPATIBLE)
		elif capability is TagCapability.READ_ONLY and self.mode is SessionMode.WRITE:
			transition = self._fail(FailureReason.READ_ONLY_TAG)
		elif capability is TagCapability.READ_WRITE and self.mode is SessionMode.WRITE:
			transition = self._move(SessionState.WRITING, Action.WRITE)
		else:
			transition = self._move(SessionState.READING, Action.READ)
		return Transition(
			previous=previous,
			state=transition.state,
			action=transition.action,
			reason=transition.reason,
			detail=transition.detail,
		)

	def _on_write_ok(self, event: WriteSucceeded) -> Transition:
		return self._complete()

	def _on_write_failed(self, event: WriteFailed) -> Transition:
		return self._fail(FailureReason.WRITE_ERROR, event.error)

	def _on_message(self, event: MessageRead) -> Transition:
		records = list(event.records)
		if not records:
			return self._fail(FailureReason.NO_MESSAGE)
		try:
			username, interests = codec.decode_records(records)
		except DecodeError as exc:
			return self._fail(FailureReason.DECODE_ERROR, exc.reason)
		self.username = username
		self.interests = interests
		return self._complete()

	def _on_message_missing(self, event: MessageMissing) -> Transition:
		return self._fail(FailureReason.NO_MESSAGE)

	def _on_read_failed(self, event: ReadFailed) -> Transition:
		return self._fail(FailureReason.READ_ERROR, event.error)

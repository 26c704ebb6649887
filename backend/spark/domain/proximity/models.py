"""States, events, and outcomes of a tag session."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Sequence


class SessionState(str, Enum):
	IDLE = "idle"
	SESSION_ACTIVE = "session_active"
	TAG_DETECTED = "tag_detected"
	CONNECTED = "connected"
	STATUS_QUERIED = "status_queried"
	READING = "reading"
	WRITING = "writing"
	COMPLETED = "completed"
	FAILED = "failed"

	@property
	def terminal(self) -> bool:
		return self in (SessionState.COMPLETED, SessionState.FAILED)


class SessionMode(str, Enum):
	READ = "read"
	WRITE = "write"


class TagCapability(str, Enum):
	NOT_SUPPORTED = "not_supported"
	READ_ONLY = "read_only"
	READ_WRITE = "read_write"


class FailureReason(str, Enum):
	UNSUPPORTED_HARDWARE = "unsupported_hardware"
	NO_TAG = "no_tag"
	DISCOVERY_ERROR = "discovery_error"
	CONNECT_ERROR = "connect_error"
	QUERY_ERROR = "query_error"
	INCOMPATIBLE = "incompatible"
	READ_ONLY_TAG = "read_only_tag"
	WRITE_ERROR = "write_error"
	READ_ERROR = "read_error"
	DECODE_ERROR = "decode_error"
	NO_MESSAGE = "no_message"
	TIMEOUT = "timeout"
	USER_CANCELLED = "user_cancelled"
	CANCELLED = "cancelled"


class Action(str, Enum):
	"""What the driver must do next against the transport."""

	NONE = "none"
	DISCOVER = "discover"
	RETRY_DISCOVERY = "retry_discovery"
	CONNECT = "connect"
	QUERY_CAPABILITY = "query_capability"
	READ = "read"
	WRITE = "write"
	RELEASE = "release"


MULTIPLE_TAGS_ADVISORY = "More than 1 tag is detected. Please remove all tags and try again."


# --- events ---


@dataclass(frozen=True)
class StartRequested:
	available: bool = True


@dataclass(frozen=True)
class TagsDetected:
	tags: Sequence[Any] = ()


@dataclass(frozen=True)
class DiscoveryFailed:
	error: str = ""


@dataclass(frozen=True)
class ConnectSucceeded:
	pass


@dataclass(frozen=True)
class ConnectFailed:
	error: str = ""


@dataclass(frozen=True)
class CapabilityReported:
	capability: TagCapability


@dataclass(frozen=True)
class CapabilityQueryFailed:
	error: str = ""


@dataclass(frozen=True)
class WriteSucceeded:
	pass


@dataclass(frozen=True)
class WriteFailed:
	error: str = ""


@dataclass(frozen=True)
class MessageRead:
	records: Sequence[bytes] = ()


@dataclass(frozen=True)
class MessageMissing:
	pass


@dataclass(frozen=True)
class ReadFailed:
	error: str = ""


@dataclass(frozen=True)
class Invalidate:
	pass


@dataclass(frozen=True)
class UserCancelled:
	pass


@dataclass(frozen=True)
class TimedOut:
	pass


@dataclass(frozen=True)
class Transition:
	"""Result of feeding one event into a session."""

	previous: SessionState
	state: SessionState
	action: Action = Action.NONE
	advisory: Optional[str] = None
	reason: Optional[FailureReason] = None
	detail: Optional[str] = None

	@property
	def terminal(self) -> bool:
		return self.state.terminal

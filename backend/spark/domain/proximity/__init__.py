"""Proximity (tag exchange) domain exports."""

from . import codec  # noqa: F401
from .exceptions import (  # noqa: F401
	DecodeError,
	InvalidPayload,
	InvalidTransition,
	TransportError,
	UndecodablePayload,
	UserCancelledError,
)
from .models import FailureReason, SessionMode, SessionState, TagCapability  # noqa: F401
from .session import SessionResult, TagSession  # noqa: F401

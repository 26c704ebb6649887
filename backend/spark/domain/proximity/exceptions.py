"""Domain-level exceptions for tag payloads and tag sessions."""

from __future__ import annotations


class ProximityError(Exception):
	"""Base class for tag exchange errors."""

	reason: str = "unknown"

	def __init__(self, reason: str | None = None) -> None:
		super().__init__(reason or self.reason)
		if reason:
			self.reason = reason


class DecodeError(ProximityError):
	reason = "decode_error"


class InvalidPayload(DecodeError):
	reason = "invalid_payload"


class UndecodablePayload(DecodeError):
	reason = "undecodable_payload"


class InvalidTransition(ProximityError):
	reason = "invalid_transition"


class TransportError(ProximityError):
	"""Raised by tag transports when an operation fails."""

	reason = "transport_error"


class UserCancelledError(TransportError):
	"""Raised by a transport when the user dismisses discovery."""

	reason = "user_cancelled"

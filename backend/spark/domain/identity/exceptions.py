"""Domain-level exceptions for profiles and connections."""

from __future__ import annotations


class IdentityError(Exception):
	"""Base class for profile store errors."""

	reason: str = "unknown"

	def __init__(self, reason: str | None = None) -> None:
		super().__init__(reason or self.reason)
		if reason:
			self.reason = reason


class DuplicateUsername(IdentityError):
	reason = "duplicate_username"


class AuthFailed(IdentityError):
	reason = "auth_failed"


class NoCurrentUser(IdentityError):
	reason = "no_current_user"


class ConnectionNotFound(IdentityError):
	reason = "connection_not_found"


class InvalidInterest(IdentityError):
	reason = "invalid_interest"


class NoSharedInterests(IdentityError):
	reason = "no_shared_interests"

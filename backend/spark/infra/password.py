"""Centralized password hashing configuration.

Profiles never keep the secret as typed: it is stored as an Argon2id hash.
Records written before hashing was introduced carry the plaintext value;
`verify_password` still accepts those (constant-time comparison) and
`check_needs_rehash` reports them so the store can upgrade on next login.
"""

from __future__ import annotations

import hmac

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from spark.settings import settings

_ARGON2_PREFIX = "$argon2"

PASSWORD_HASHER = PasswordHasher(
	time_cost=settings.password_time_cost,
	memory_cost=settings.password_memory_cost,
	parallelism=settings.password_parallelism,
	hash_len=32,
	salt_len=16,
)


def is_hashed(stored: str) -> bool:
	return stored.startswith(_ARGON2_PREFIX)


def hash_password(password: str) -> str:
	"""Hash a password using Argon2id."""
	return PASSWORD_HASHER.hash(password)


def verify_password(stored: str, password: str) -> bool:
	"""Verify a password against its stored value.

	Returns True if valid, False otherwise.
	"""
	if not is_hashed(stored):
		return hmac.compare_digest(stored.encode("utf-8"), password.encode("utf-8"))
	try:
		return PASSWORD_HASHER.verify(stored, password)
	except (VerificationError, InvalidHashError):
		return False


def check_needs_rehash(stored: str) -> bool:
	"""Return True for legacy plaintext values and weaker Argon2 parameters."""
	if not is_hashed(stored):
		return True
	return PASSWORD_HASHER.check_needs_rehash(stored)

"""Per-user interest cache and interest editing helpers."""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError

from spark.domain.identity import schemas
from spark.domain.identity.exceptions import InvalidInterest
from spark.domain.identity.models import InterestCategory, InterestSet
from spark.infra.kv import KeyValueStore, StoreBackendError
from spark.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "InterestsData_"


def cache_key(username: str) -> str:
	return f"{CACHE_KEY_PREFIX}{username}"


class InterestCache:
	"""Interests keyed by username, readable without hydrating the profile."""

	def __init__(self, kv: KeyValueStore) -> None:
		self._kv = kv

	def load(self, username: str) -> Optional[InterestSet]:
		key = cache_key(username)
		try:
			raw = self._kv.load(key)
		except StoreBackendError:
			logger.exception("interest cache read failed", extra={"key": key})
			obs_metrics.inc_store_load_failure("interests")
			return None
		if raw is None:
			return None
		try:
			return schemas.InterestsRecord.model_validate_json(raw).to_domain()
		except ValidationError:
			logger.warning("discarding unreadable interest cache entry", extra={"key": key})
			obs_metrics.inc_store_load_failure("interests")
			return None

	def save(self, username: str, interests: InterestSet) -> bool:
		key = cache_key(username)
		data = schemas.InterestsRecord.from_domain(interests).model_dump_json().encode("utf-8")
		try:
			self._kv.save(key, data)
		except StoreBackendError:
			logger.exception("interest cache write failed", extra={"key": key})
			obs_metrics.inc_store_persist_failure("interests")
			# A stale entry would shadow the profile in interests_for.
			self.drop(username)
			return False
		return True

	def drop(self, username: str) -> None:
		key = cache_key(username)
		try:
			self._kv.delete(key)
		except StoreBackendError:
			logger.exception("interest cache delete failed", extra={"key": key})
			obs_metrics.inc_store_persist_failure("interests")


def _clean(value: str) -> str:
	cleaned = (value or "").strip()
	if not cleaned:
		raise InvalidInterest("interest_empty")
	return cleaned


def add_interest(interests: InterestSet, category: InterestCategory, value: str) -> InterestSet:
	"""Append ``value`` to one category; duplicates are rejected."""
	term = _clean(value)
	current = interests.get(category)
	if term in current:
		raise InvalidInterest("interest_duplicate")
	return interests.with_category(category, current + (term,))


def remove_interest(interests: InterestSet, category: InterestCategory, value: str) -> InterestSet:
	term = _clean(value)
	current = interests.get(category)
	if term not in current:
		raise InvalidInterest("interest_not_found")
	return interests.with_category(category, tuple(item for item in current if item != term))

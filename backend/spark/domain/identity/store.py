"""Durable profile collection with a single current-user pointer.

The store owns every ``Profile``. The current user is kept as an identifier
and resolved by lookup, so readers always see the stored object after any
mutation. Each mutating call writes the whole collection under
``UserProfiles`` before returning.

Persistence is best-effort: a failed write is logged and counted, and the
in-memory change is kept. A crash before the next successful write loses
that change.
"""

from __future__ import annotations

import logging
import threading
from typing import List, Optional, Tuple
from uuid import UUID

from pydantic import ValidationError

from spark.domain.identity import interests as interest_ops
from spark.domain.identity import schemas
from spark.domain.identity.exceptions import (
	AuthFailed,
	ConnectionNotFound,
	DuplicateUsername,
	IdentityError,
	NoCurrentUser,
)
from spark.domain.identity.models import Connection, Coordinate, InterestCategory, InterestSet, Profile
from spark.infra import password as passwords
from spark.infra.kv import KeyValueStore, StoreBackendError
from spark.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)

PROFILES_KEY = "UserProfiles"


class ProfileStore:
	def __init__(self, kv: KeyValueStore) -> None:
		self._kv = kv
		self._cache = interest_ops.InterestCache(kv)
		self._lock = threading.RLock()
		self._profiles: List[Profile] = self._load()
		self._current_id: Optional[UUID] = None
		logger.info("profile store loaded", extra={"profile_count": len(self._profiles)})

	# --- persistence ---

	def _load(self) -> List[Profile]:
		try:
			raw = self._kv.load(PROFILES_KEY)
		except StoreBackendError:
			logger.exception("profile collection read failed; starting empty")
			obs_metrics.inc_store_load_failure("profiles")
			return []
		if raw is None:
			return []
		try:
			records = schemas.PROFILE_COLLECTION.validate_json(raw)
		except ValidationError as exc:
			logger.warning(
				"profile collection unreadable; starting empty",
				extra={"error_count": exc.error_count()},
			)
			obs_metrics.inc_store_load_failure("profiles")
			return []
		return [record.to_domain() for record in records]

	def _persist(self) -> bool:
		records = [schemas.ProfileRecord.from_domain(profile) for profile in self._profiles]
		data = schemas.PROFILE_COLLECTION.dump_json(records)
		try:
			self._kv.save(PROFILES_KEY, data)
		except StoreBackendError:
			logger.exception("profile collection write failed; change kept in memory only")
			obs_metrics.inc_store_persist_failure("profiles")
			return False
		return True

	# --- lookups ---

	@property
	def profiles(self) -> Tuple[Profile, ...]:
		return tuple(self._profiles)

	@property
	def current_user(self) -> Optional[Profile]:
		if self._current_id is None:
			return None
		return self._find_by_id(self._current_id)

	def require_current_user(self) -> Profile:
		profile = self.current_user
		if profile is None:
			raise NoCurrentUser()
		return profile

	def get_profile(self, username: str) -> Optional[Profile]:
		for profile in self._profiles:
			if profile.username == username:
				return profile
		return None

	def _find_by_id(self, profile_id: UUID) -> Optional[Profile]:
		for profile in self._profiles:
			if profile.id == profile_id:
				return profile
		return None

	# --- account lifecycle ---

	def add_profile(self, username: str, password: str, bio: str = "") -> Profile:
		if not username or not username.strip():
			obs_metrics.inc_profile_reject("username_required")
			raise IdentityError("username_required")
		with self._lock:
			if self.get_profile(username) is not None:
				obs_metrics.inc_profile_reject(DuplicateUsername.reason)
				raise DuplicateUsername()
			profile = Profile(username=username, password=passwords.hash_password(password), bio=bio)
			self._profiles.append(profile)
			self._persist()
			self._cache.save(username, profile.interests)
		obs_metrics.inc_profile_created()
		logger.info("profile created", extra={"username": username})
		return profile

	def authenticate(self, username: str, password: str) -> Profile:
		with self._lock:
			profile = self.get_profile(username)
			if profile is None or not passwords.verify_password(profile.password, password):
				obs_metrics.inc_auth_attempt("failed")
				logger.info("authentication failed", extra={"username": username})
				raise AuthFailed()
			if passwords.check_needs_rehash(profile.password):
				profile.password = passwords.hash_password(password)
				self._persist()
			self._current_id = profile.id
		obs_metrics.inc_auth_attempt("ok")
		logger.info("user authenticated", extra={"username": username})
		return profile

	def logout(self) -> None:
		self._current_id = None

	def delete_current_user(self) -> bool:
		with self._lock:
			profile = self.current_user
			if profile is None:
				return False
			self._profiles = [item for item in self._profiles if item.id != profile.id]
			self._current_id = None
			self._cache.drop(profile.username)
			self._persist()
		logger.info("profile deleted", extra={"username": profile.username})
		return True

	# --- connections ---

	def add_connection(
		self,
		username: str,
		photo: Optional[bytes] = None,
		coordinate: Optional[Coordinate] = None,
	) -> Optional[Connection]:
		with self._lock:
			profile = self.current_user
			if profile is None:
				logger.debug("add_connection ignored without a current user")
				return None
			connection = Connection.new(username, photo=photo, coordinate=coordinate)
			profile.connections.append(connection)
			self._persist()
		obs_metrics.inc_connection_recorded()
		logger.info(
			"connection recorded",
			extra={"peer": username, "has_photo": photo is not None, "has_location": coordinate is not None},
		)
		return connection

	def remove_connection(self, connection_id: UUID) -> Connection:
		with self._lock:
			profile = self.require_current_user()
			for index, connection in enumerate(profile.connections):
				if connection.id == connection_id:
					del profile.connections[index]
					self._persist()
					return connection
		raise ConnectionNotFound()

	def mapped_connections(self) -> List[Connection]:
		profile = self.require_current_user()
		return [item for item in profile.connections if item.coordinate is not None]

	def leaderboard(self) -> List[Profile]:
		return sorted(self._profiles, key=lambda item: (-item.connection_count, item.username))

	# --- interests ---

	def update_interests(self, interests: InterestSet) -> Optional[Profile]:
		with self._lock:
			profile = self.current_user
			if profile is None:
				return None
			profile.interests = interests
			self._cache.save(profile.username, interests)
			self._persist()
		return profile

	def add_interest(self, category: InterestCategory, value: str) -> InterestSet:
		with self._lock:
			profile = self.require_current_user()
			updated = interest_ops.add_interest(profile.interests, category, value)
			self.update_interests(updated)
		return updated

	def remove_interest(self, category: InterestCategory, value: str) -> InterestSet:
		with self._lock:
			profile = self.require_current_user()
			updated = interest_ops.remove_interest(profile.interests, category, value)
			self.update_interests(updated)
		return updated

	def interests_for(self, username: str) -> InterestSet:
		cached = self._cache.load(username)
		if cached is not None:
			return cached
		profile = self.get_profile(username)
		if profile is not None:
			return profile.interests
		return InterestSet.default()

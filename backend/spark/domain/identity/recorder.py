"""Confirmation-gated recording of encounters as connections."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Protocol, Sequence, Union

from spark.domain.identity.exceptions import NoSharedInterests
from spark.domain.identity.matching import intersect
from spark.domain.identity.models import Connection, Coordinate, InterestSet
from spark.domain.identity.store import ProfileStore
from spark.domain.proximity.session import SessionResult
from spark.obs import metrics as obs_metrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ConfirmConnect:
	photo: Optional[bytes] = None
	coordinate: Optional[Coordinate] = None


@dataclass(frozen=True, slots=True)
class Cancel:
	pass


ConfirmationResult = Union[ConfirmConnect, Cancel]


class ConfirmationPrompt(Protocol):
	async def confirm(self, username: str, shared_interests: Sequence[str]) -> ConfirmationResult:
		...


class EncounterStatus(str, Enum):
	CONNECTED = "connected"
	DECLINED = "declined"
	NO_SHARED_INTERESTS = "no_shared_interests"
	NO_CURRENT_USER = "no_current_user"
	SESSION_FAILED = "session_failed"


@dataclass(slots=True)
class EncounterOutcome:
	status: EncounterStatus
	peer_username: Optional[str] = None
	shared_interests: List[str] = field(default_factory=list)
	connection: Optional[Connection] = None


class ConnectionRecorder:
	"""Asks the user before anything touches the store.

	A declined match never mutates persisted state.
	"""

	def __init__(self, store: ProfileStore, prompt: ConfirmationPrompt) -> None:
		self._store = store
		self._prompt = prompt

	async def record(self, peer_username: str, shared_interests: Sequence[str]) -> Optional[Connection]:
		if not shared_interests:
			raise NoSharedInterests()
		decision = await self._prompt.confirm(peer_username, list(shared_interests))
		if isinstance(decision, ConfirmConnect):
			return self._store.add_connection(peer_username, decision.photo, decision.coordinate)
		logger.info("connection declined", extra={"peer": peer_username})
		return None

	async def handle_encounter(self, peer_username: str, peer_interests: InterestSet) -> EncounterOutcome:
		current = self._store.current_user
		if current is None:
			obs_metrics.inc_encounter(EncounterStatus.NO_CURRENT_USER.value)
			logger.warning("encounter ignored without a current user", extra={"peer": peer_username})
			return EncounterOutcome(EncounterStatus.NO_CURRENT_USER, peer_username)

		shared = intersect(self._store.interests_for(current.username), peer_interests)
		if not shared:
			obs_metrics.inc_encounter(EncounterStatus.NO_SHARED_INTERESTS.value)
			logger.info("no shared interests", extra={"peer": peer_username})
			return EncounterOutcome(EncounterStatus.NO_SHARED_INTERESTS, peer_username)

		connection = await self.record(peer_username, shared)
		status = EncounterStatus.CONNECTED if connection is not None else EncounterStatus.DECLINED
		obs_metrics.inc_encounter(status.value)
		return EncounterOutcome(status, peer_username, shared, connection)

	async def handle_session_result(self, result: SessionResult) -> EncounterOutcome:
		if not result.ok or result.username is None or result.interests is None:
			obs_metrics.inc_encounter(EncounterStatus.SESSION_FAILED.value)
			return EncounterOutcome(EncounterStatus.SESSION_FAILED)
		return await self.handle_encounter(result.username, result.interests)

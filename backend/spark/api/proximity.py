"""Payload export and peer payload matching over HTTP."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from spark.api.deps import get_current_profile, get_store
from spark.domain.identity import schemas
from spark.domain.identity.matching import intersect
from spark.domain.identity.models import Coordinate, Profile
from spark.domain.identity.recorder import ConfirmConnect, ConfirmationResult, ConnectionRecorder
from spark.domain.identity.store import ProfileStore
from spark.domain.proximity import codec

router = APIRouter(tags=["proximity"])
logger = logging.getLogger(__name__)


class _RequestConfirmation:
	"""The HTTP call itself is the user's confirmation."""

	def __init__(self, photo: Optional[bytes], coordinate: Optional[Coordinate]) -> None:
		self._decision = ConfirmConnect(photo=photo, coordinate=coordinate)

	async def confirm(self, username: str, shared_interests: Sequence[str]) -> ConfirmationResult:
		return self._decision


@router.get("/me/payload", response_class=PlainTextResponse)
async def my_payload(
	profile: Profile = Depends(get_current_profile),
	store: ProfileStore = Depends(get_store),
) -> PlainTextResponse:
	data = codec.encode(profile.username, store.interests_for(profile.username))
	return PlainTextResponse(data.decode(codec.ENCODING))


@router.post("/encounters", response_model=schemas.EncounterOut)
async def encounter(
	payload: schemas.EncounterRequest,
	profile: Profile = Depends(get_current_profile),
	store: ProfileStore = Depends(get_store),
) -> schemas.EncounterOut:
	peer_username, peer_interests = codec.decode(payload.payload.encode(codec.ENCODING))
	shared = intersect(store.interests_for(profile.username), peer_interests)
	logger.info("encounter matched", extra={"peer": peer_username, "shared_count": len(shared)})
	return schemas.EncounterOut(
		username=peer_username,
		interests=schemas.InterestsRecord.from_domain(peer_interests),
		shared_interests=shared,
	)


@router.post("/encounters/connect", response_model=schemas.EncounterOutcomeOut)
async def connect_encounter(
	payload: schemas.EncounterConnectRequest,
	profile: Profile = Depends(get_current_profile),
	store: ProfileStore = Depends(get_store),
) -> schemas.EncounterOutcomeOut:
	peer_username, peer_interests = codec.decode(payload.payload.encode(codec.ENCODING))
	coordinate = payload.coordinate.to_domain() if payload.coordinate else None
	recorder = ConnectionRecorder(store, _RequestConfirmation(payload.photo_bytes(), coordinate))
	outcome = await recorder.handle_encounter(peer_username, peer_interests)
	return schemas.EncounterOutcomeOut(
		status=outcome.status.value,
		username=outcome.peer_username,
		shared_interests=outcome.shared_interests,
		connection=schemas.ConnectionRecord.from_domain(outcome.connection) if outcome.connection else None,
	)

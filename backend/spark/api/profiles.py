"""REST surface for sign-up, login, interests, connections and the leaderboard."""

from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from spark.api.deps import get_current_profile, get_store
from spark.domain.identity import schemas
from spark.domain.identity.models import InterestCategory, Profile
from spark.domain.identity.store import ProfileStore

router = APIRouter(tags=["profiles"])


@router.post("/profiles", response_model=schemas.ProfileOut, status_code=status.HTTP_201_CREATED)
async def sign_up(payload: schemas.SignUpRequest, store: ProfileStore = Depends(get_store)) -> schemas.ProfileOut:
	profile = store.add_profile(payload.username, payload.password, payload.bio)
	return schemas.ProfileOut.from_domain(profile)


@router.post("/session", response_model=schemas.ProfileOut)
async def log_in(payload: schemas.LoginRequest, store: ProfileStore = Depends(get_store)) -> schemas.ProfileOut:
	profile = store.authenticate(payload.username, payload.password)
	return schemas.ProfileOut.from_domain(profile)


@router.delete("/session", status_code=status.HTTP_204_NO_CONTENT)
async def log_out(store: ProfileStore = Depends(get_store)) -> Response:
	store.logout()
	return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me", response_model=schemas.ProfileOut)
async def me(profile: Profile = Depends(get_current_profile)) -> schemas.ProfileOut:
	return schemas.ProfileOut.from_domain(profile)


@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(
	profile: Profile = Depends(get_current_profile),
	store: ProfileStore = Depends(get_store),
) -> Response:
	store.delete_current_user()
	return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/me/interests", response_model=schemas.InterestsRecord)
async def my_interests(
	profile: Profile = Depends(get_current_profile),
	store: ProfileStore = Depends(get_store),
) -> schemas.InterestsRecord:
	return schemas.InterestsRecord.from_domain(store.interests_for(profile.username))


@router.put("/me/interests", response_model=schemas.InterestsRecord)
async def replace_interests(
	payload: schemas.InterestsRecord,
	profile: Profile = Depends(get_current_profile),
	store: ProfileStore = Depends(get_store),
) -> schemas.InterestsRecord:
	store.update_interests(payload.to_domain())
	return schemas.InterestsRecord.from_domain(profile.interests)


@router.post("/me/interests/{category}", response_model=schemas.InterestsRecord)
async def add_interest(
	category: InterestCategory,
	payload: schemas.InterestAddRequest,
	store: ProfileStore = Depends(get_store),
) -> schemas.InterestsRecord:
	return schemas.InterestsRecord.from_domain(store.add_interest(category, payload.value))


@router.delete("/me/interests/{category}/{value}", response_model=schemas.InterestsRecord)
async def remove_interest(
	category: InterestCategory,
	value: str,
	store: ProfileStore = Depends(get_store),
) -> schemas.InterestsRecord:
	return schemas.InterestsRecord.from_domain(store.remove_interest(category, value))


@router.get("/me/connections", response_model=List[schemas.ConnectionRecord])
async def my_connections(profile: Profile = Depends(get_current_profile)) -> List[schemas.ConnectionRecord]:
	return [schemas.ConnectionRecord.from_domain(item) for item in profile.connections]


@router.post("/me/connections", response_model=schemas.ConnectionRecord, status_code=status.HTTP_201_CREATED)
async def add_connection(
	payload: schemas.ConnectionCreateRequest,
	profile: Profile = Depends(get_current_profile),
	store: ProfileStore = Depends(get_store),
) -> schemas.ConnectionRecord:
	coordinate = payload.coordinate.to_domain() if payload.coordinate else None
	connection = store.add_connection(payload.username, payload.photo_bytes(), coordinate)
	return schemas.ConnectionRecord.from_domain(connection)


@router.get("/me/connections/map", response_model=List[schemas.ConnectionRecord])
async def mapped_connections(store: ProfileStore = Depends(get_store)) -> List[schemas.ConnectionRecord]:
	return [schemas.ConnectionRecord.from_domain(item) for item in store.mapped_connections()]


@router.delete("/me/connections/{connection_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_connection(connection_id: UUID, store: ProfileStore = Depends(get_store)) -> Response:
	store.remove_connection(connection_id)
	return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/leaderboard", response_model=List[schemas.LeaderboardEntry])
async def leaderboard(store: ProfileStore = Depends(get_store)) -> List[schemas.LeaderboardEntry]:
	return [
		schemas.LeaderboardEntry(username=item.username, connection_count=item.connection_count)
		for item in store.leaderboard()
	]

"""Pydantic schemas for persisted profile state and the HTTP surface."""

from __future__ import annotations

import base64
import binascii
from datetime import datetime
from typing import Annotated, List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, TypeAdapter, field_validator

from spark.domain.identity import models


def _b64encode(value: Optional[bytes]) -> Optional[str]:
	if value is None:
		return None
	return base64.b64encode(value).decode("ascii")


def _b64decode(value: Optional[str]) -> Optional[bytes]:
	if value is None:
		return None
	return base64.b64decode(value.encode("ascii"), validate=True)


def _validate_b64(value: Optional[str]) -> Optional[str]:
	if value is None:
		return None
	try:
		base64.b64decode(value.encode("ascii"), validate=True)
	except (binascii.Error, UnicodeEncodeError) as exc:
		raise ValueError("photo must be base64 encoded") from exc
	return value


class InterestsRecord(BaseModel):
	academic: List[str] = Field(default_factory=list)
	sports: List[str] = Field(default_factory=list)
	media: List[str] = Field(default_factory=list)

	@classmethod
	def from_domain(cls, interests: models.InterestSet) -> "InterestsRecord":
		return cls(
			academic=list(interests.academic),
			sports=list(interests.sports),
			media=list(interests.media),
		)

	def to_domain(self) -> models.InterestSet:
		return models.InterestSet(
			academic=tuple(self.academic),
			sports=tuple(self.sports),
			media=tuple(self.media),
		)


class CoordinateRecord(BaseModel):
	latitude: Annotated[float, Field(ge=-90, le=90)]
	longitude: Annotated[float, Field(ge=-180, le=180)]

	@classmethod
	def from_domain(cls, coordinate: Optional[models.Coordinate]) -> Optional["CoordinateRecord"]:
		if coordinate is None:
			return None
		return cls(latitude=coordinate.latitude, longitude=coordinate.longitude)

	def to_domain(self) -> models.Coordinate:
		return models.Coordinate(latitude=self.latitude, longitude=self.longitude)


class ConnectionRecord(BaseModel):
	id: UUID
	username: str
	timestamp: datetime
	photo: Optional[str] = None
	coordinate: Optional[CoordinateRecord] = None

	check_photo = field_validator("photo")(_validate_b64)

	@classmethod
	def from_domain(cls, connection: models.Connection) -> "ConnectionRecord":
		return cls(
			id=connection.id,
			username=connection.username,
			timestamp=connection.timestamp,
			photo=_b64encode(connection.photo),
			coordinate=CoordinateRecord.from_domain(connection.coordinate),
		)

	def to_domain(self) -> models.Connection:
		return models.Connection(
			id=self.id,
			username=self.username,
			timestamp=self.timestamp,
			photo=_b64decode(self.photo),
			coordinate=self.coordinate.to_domain() if self.coordinate else None,
		)


class ProfileRecord(BaseModel):
	id: UUID
	username: str
	password: str
	bio: str = ""
	interests: InterestsRecord = Field(default_factory=InterestsRecord)
	connections: List[ConnectionRecord] = Field(default_factory=list)

	@classmethod
	def from_domain(cls, profile: models.Profile) -> "ProfileRecord":
		return cls(
			id=profile.id,
			username=profile.username,
			password=profile.password,
			bio=profile.bio,
			interests=InterestsRecord.from_domain(profile.interests),
			connections=[ConnectionRecord.from_domain(item) for item in profile.connections],
		)

	def to_domain(self) -> models.Profile:
		return models.Profile(
			id=self.id,
			username=self.username,
			password=self.password,
			bio=self.bio,
			interests=self.interests.to_domain(),
			connections=[item.to_domain() for item in self.connections],
		)


PROFILE_COLLECTION = TypeAdapter(List[ProfileRecord])


# --- HTTP surface ---


class SignUpRequest(BaseModel):
	username: Annotated[str, Field(min_length=1, max_length=64)]
	password: Annotated[str, Field(min_length=1)]
	bio: Annotated[str, Field(default="", max_length=500)]


class LoginRequest(BaseModel):
	username: str
	password: str


class InterestAddRequest(BaseModel):
	value: Annotated[str, Field(min_length=1, max_length=80)]


class ConnectionCreateRequest(BaseModel):
	username: Annotated[str, Field(min_length=1, max_length=64)]
	photo: Optional[str] = None
	coordinate: Optional[CoordinateRecord] = None

	check_photo = field_validator("photo")(_validate_b64)

	def photo_bytes(self) -> Optional[bytes]:
		return _b64decode(self.photo)


class ProfileOut(BaseModel):
	id: UUID
	username: str
	bio: str
	interests: InterestsRecord
	connection_count: int

	@classmethod
	def from_domain(cls, profile: models.Profile) -> "ProfileOut":
		return cls(
			id=profile.id,
			username=profile.username,
			bio=profile.bio,
			interests=InterestsRecord.from_domain(profile.interests),
			connection_count=profile.connection_count,
		)


class EncounterRequest(BaseModel):
	payload: Annotated[str, Field(min_length=1, max_length=4096)]


class EncounterOut(BaseModel):
	username: str
	interests: InterestsRecord
	shared_interests: List[str]


class LeaderboardEntry(BaseModel):
	username: str
	connection_count: int


class EncounterConnectRequest(BaseModel):
	payload: Annotated[str, Field(min_length=1, max_length=4096)]
	photo: Optional[str] = None
	coordinate: Optional[CoordinateRecord] = None

	check_photo = field_validator("photo")(_validate_b64)

	def photo_bytes(self) -> Optional[bytes]:
		return _b64decode(self.photo)


class EncounterOutcomeOut(BaseModel):
	status: str
	username: Optional[str] = None
	shared_interests: List[str] = Field(default_factory=list)
	connection: Optional[ConnectionRecord] = None

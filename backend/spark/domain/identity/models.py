"""Domain models for profiles, interests, and connections."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Iterable, Optional, Tuple
from uuid import UUID, uuid4


class InterestCategory(str, Enum):
	ACADEMIC = "academic"
	SPORTS = "sports"
	MEDIA = "media"


# Fixed display and matching order.
CATEGORY_ORDER: Tuple[InterestCategory, ...] = (
	InterestCategory.ACADEMIC,
	InterestCategory.SPORTS,
	InterestCategory.MEDIA,
)


def _unique(values: Iterable[str]) -> Tuple[str, ...]:
	return tuple(dict.fromkeys(values))


@dataclass(frozen=True, slots=True)
class InterestSet:
	"""Three ordered interest lists; no duplicates within a list."""

	academic: Tuple[str, ...] = ()
	sports: Tuple[str, ...] = ()
	media: Tuple[str, ...] = ()

	def __post_init__(self) -> None:
		object.__setattr__(self, "academic", _unique(self.academic))
		object.__setattr__(self, "sports", _unique(self.sports))
		object.__setattr__(self, "media", _unique(self.media))

	@classmethod
	def default(cls) -> "InterestSet":
		return cls(
			academic=("Math", "Science"),
			sports=("Football", "Basketball"),
			media=("Movies", "Music"),
		)

	def get(self, category: InterestCategory) -> Tuple[str, ...]:
		return getattr(self, InterestCategory(category).value)

	def with_category(self, category: InterestCategory, values: Iterable[str]) -> "InterestSet":
		return replace(self, **{InterestCategory(category).value: tuple(values)})

	def is_empty(self) -> bool:
		return not (self.academic or self.sports or self.media)

	def to_dict(self) -> dict[str, list[str]]:
		return {category.value: list(self.get(category)) for category in CATEGORY_ORDER}


@dataclass(frozen=True, slots=True)
class Coordinate:
	latitude: float
	longitude: float

	def __post_init__(self) -> None:
		if not -90.0 <= self.latitude <= 90.0:
			raise ValueError(f"latitude out of range: {self.latitude}")
		if not -180.0 <= self.longitude <= 180.0:
			raise ValueError(f"longitude out of range: {self.longitude}")


@dataclass(frozen=True, slots=True)
class Connection:
	"""A recorded encounter with a peer. Never mutated after creation."""

	username: str
	timestamp: datetime
	photo: Optional[bytes] = None
	coordinate: Optional[Coordinate] = None
	id: UUID = field(default_factory=uuid4)

	@classmethod
	def new(
		cls,
		username: str,
		*,
		photo: Optional[bytes] = None,
		coordinate: Optional[Coordinate] = None,
	) -> "Connection":
		return cls(
			username=username,
			timestamp=datetime.now(timezone.utc),
			photo=photo,
			coordinate=coordinate,
		)


@dataclass(slots=True)
class Profile:
	username: str
	password: str
	bio: str = ""
	interests: InterestSet = field(default_factory=InterestSet.default)
	connections: list[Connection] = field(default_factory=list)
	id: UUID = field(default_factory=uuid4)

	@property
	def connection_count(self) -> int:
		return len(self.connections)

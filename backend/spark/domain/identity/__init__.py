"""Identity domain exports."""

from .exceptions import (  # noqa: F401
	AuthFailed,
	ConnectionNotFound,
	DuplicateUsername,
	IdentityError,
	InvalidInterest,
	NoCurrentUser,
	NoSharedInterests,
)
from .matching import intersect  # noqa: F401
from .models import Connection, Coordinate, InterestCategory, InterestSet, Profile  # noqa: F401
from .store import ProfileStore  # noqa: F401

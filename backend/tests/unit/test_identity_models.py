import pytest

from spark.domain.identity.interests import add_interest, remove_interest
from spark.domain.identity.exceptions import InvalidInterest
from spark.domain.identity.models import Connection, Coordinate, InterestCategory, InterestSet, Profile


def test_interest_set_drops_duplicates_and_keeps_order():
	interests = InterestSet(academic=("Math", "Art", "Math"))
	assert interests.academic == ("Math", "Art")


def test_default_interests():
	interests = InterestSet.default()
	assert interests.academic == ("Math", "Science")
	assert interests.sports == ("Football", "Basketball")
	assert interests.media == ("Movies", "Music")


def test_new_profile_has_default_interests_and_no_connections():
	profile = Profile(username="alice", password="x")
	assert profile.interests == InterestSet.default()
	assert profile.connection_count == 0


def test_coordinate_rejects_out_of_range_values():
	with pytest.raises(ValueError):
		Coordinate(latitude=91.0, longitude=0.0)
	with pytest.raises(ValueError):
		Coordinate(latitude=0.0, longitude=-181.0)


def test_connection_equality_covers_coordinate_components():
	first = Connection.new("bob", coordinate=Coordinate(45.5, -73.5))
	same = Connection(
		username=first.username,
		timestamp=first.timestamp,
		coordinate=Coordinate(45.5, -73.5),
		id=first.id,
	)
	moved = Connection(
		username=first.username,
		timestamp=first.timestamp,
		coordinate=Coordinate(45.5, -73.6),
		id=first.id,
	)
	assert first == same
	assert hash(first) == hash(same)
	assert first != moved


def test_add_interest_trims_and_rejects_duplicates():
	interests = add_interest(InterestSet(), InterestCategory.SPORTS, "  Tennis ")
	assert interests.sports == ("Tennis",)
	with pytest.raises(InvalidInterest) as excinfo:
		add_interest(interests, InterestCategory.SPORTS, "Tennis")
	assert excinfo.value.reason == "interest_duplicate"


def test_add_interest_rejects_blank_value():
	with pytest.raises(InvalidInterest) as excinfo:
		add_interest(InterestSet(), InterestCategory.MEDIA, "   ")
	assert excinfo.value.reason == "interest_empty"


def test_remove_interest():
	interests = remove_interest(InterestSet.default(), InterestCategory.ACADEMIC, "Math")
	assert interests.academic == ("Science",)
	with pytest.raises(InvalidInterest) as excinfo:
		remove_interest(interests, InterestCategory.ACADEMIC, "Math")
	assert excinfo.value.reason == "interest_not_found"

import pytest

from spark.domain.identity.models import InterestSet
from spark.domain.proximity import codec
from spark.domain.proximity.exceptions import DecodeError, InvalidPayload, UndecodablePayload


def test_encode_matches_wire_layout():
	interests = InterestSet(academic=("Math",), sports=(), media=("Music",))
	data = codec.encode("bob", interests)
	assert data == b"Username: bob\nAcademic Interests: Math\nSports Interests: \nMedia Interests: Music"


def test_decode_restores_username_and_interests():
	interests = InterestSet(academic=("Math", "Physics"), sports=(), media=("Music",))
	username, decoded = codec.decode(codec.encode("bob", interests))
	assert username == "bob"
	assert decoded.academic == ("Math", "Physics")
	assert decoded.sports == ()
	assert decoded.media == ("Music",)


def test_decode_trims_whitespace_and_ignores_unknown_keys():
	data = b"  Username :  carol \nFavourite Colour: teal\nSports Interests:  Tennis ,Chess,, \nnot a pair"
	username, decoded = codec.decode(data)
	assert username == "carol"
	assert decoded.sports == ("Tennis", "Chess")
	assert decoded.academic == ()
	assert decoded.media == ()


def test_decode_splits_on_first_colon_only():
	username, decoded = codec.decode(b"Username: dave\nMedia Interests: Star Wars: A New Hope")
	assert username == "dave"
	assert decoded.media == ("Star Wars: A New Hope",)


def test_missing_username_is_invalid_payload():
	with pytest.raises(InvalidPayload) as excinfo:
		codec.decode(b"Academic Interests: Math\nMedia Interests: Music")
	assert excinfo.value.reason == "username_missing"


def test_empty_username_is_invalid_payload():
	with pytest.raises(InvalidPayload):
		codec.decode(b"Username:   \nAcademic Interests: Math")


def test_invalid_utf8_is_undecodable():
	with pytest.raises(UndecodablePayload):
		codec.decode(b"Username: \xff\xfe")


def test_decode_records_uses_first_decodable_record():
	records = [b"\xff\xfe", b"no username here", codec.encode("erin", InterestSet.default())]
	username, interests = codec.decode_records(records)
	assert username == "erin"
	assert interests == InterestSet.default()


def test_decode_records_raises_last_error_when_nothing_decodes():
	with pytest.raises(InvalidPayload):
		codec.decode_records([b"\xff", b"Sports Interests: Golf"])


def test_decode_records_without_records():
	with pytest.raises(DecodeError) as excinfo:
		codec.decode_records([])
	assert excinfo.value.reason == "no_records"

"""Text payload written to and read from tags.

Layout, one ``key: value`` pair per line::

	Username: bob
	Academic Interests: Math
	Sports Interests:
	Media Interests: Music

List values are joined with ``", "``. Readers ignore keys they do not know.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

from spark.domain.identity.models import InterestCategory, InterestSet
from spark.domain.proximity.exceptions import DecodeError, InvalidPayload, UndecodablePayload

USERNAME_KEY = "Username"
CATEGORY_KEYS: Dict[InterestCategory, str] = {
	InterestCategory.ACADEMIC: "Academic Interests",
	InterestCategory.SPORTS: "Sports Interests",
	InterestCategory.MEDIA: "Media Interests",
}
LIST_SEPARATOR = ", "
ENCODING = "utf-8"


def encode(username: str, interests: InterestSet) -> bytes:
	lines = [f"{USERNAME_KEY}: {username}"]
	for category, key in CATEGORY_KEYS.items():
		lines.append(f"{key}: {LIST_SEPARATOR.join(interests.get(category))}")
	return "\n".join(lines).encode(ENCODING)


def _split_list(value: str) -> List[str]:
	return [item.strip() for item in value.split(",") if item.strip()]


def decode(data: bytes) -> Tuple[str, InterestSet]:
	try:
		text = bytes(data).decode(ENCODING)
	except UnicodeDecodeError as exc:
		raise UndecodablePayload() from exc

	fields: Dict[str, str] = {}
	for line in text.splitlines():
		if ":" not in line:
			continue
		key, value = line.split(":", 1)
		fields[key.strip()] = value.strip()

	username = fields.get(USERNAME_KEY, "")
	if not username:
		raise InvalidPayload("username_missing")

	values = {
		category.value: tuple(_split_list(fields.get(key, "")))
		for category, key in CATEGORY_KEYS.items()
	}
	return username, InterestSet(**values)


def decode_records(records: Iterable[bytes]) -> Tuple[str, InterestSet]:
	"""Decode the first record of a tag message that carries a profile."""
	last_error: DecodeError = InvalidPayload("no_records")
	for record in records:
		try:
			return decode(record)
		except DecodeError as exc:
			last_error = exc
	raise last_error

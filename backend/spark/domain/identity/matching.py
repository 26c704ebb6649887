"""Shared-interest computation between two interest sets."""

from __future__ import annotations

from typing import List

from spark.domain.identity.models import CATEGORY_ORDER, InterestSet


def intersect(mine: InterestSet, theirs: InterestSet) -> List[str]:
	"""Return the interests both sides declared.

	Each category is matched on its own and keeps ``mine``'s order; results are
	concatenated academic, sports, media. An empty list means there is nothing
	to confirm and the connection flow should stop.
	"""
	shared: List[str] = []
	for category in CATEGORY_ORDER:
		their_terms = set(theirs.get(category))
		shared.extend(term for term in mine.get(category) if term in their_terms)
	return shared

"""Request dependencies resolving the process-wide collaborators."""

from __future__ import annotations

from fastapi import Request

from spark.domain.identity.models import Profile
from spark.domain.identity.store import ProfileStore
from spark.obs import logging as obs_logging


def get_store(request: Request) -> ProfileStore:
	return request.app.state.store


async def get_current_profile(request: Request) -> Profile:
	profile = get_store(request).require_current_user()
	# Bound in the request task's context; it ends with the request.
	obs_logging.bind_context(username=profile.username)
	return profile

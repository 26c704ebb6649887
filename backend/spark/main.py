"""FastAPI application entrypoint."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from spark import __version__
from spark.api import ops, profiles, proximity
from spark.api.errors import install_error_handlers
from spark.domain.identity.store import ProfileStore
from spark.infra.kv import build_key_value_store
from spark.obs import configure_logging_once
from spark.obs import init as obs_init
from spark.settings import settings


@asynccontextmanager
async def lifespan(app: FastAPI):
	configure_logging_once()
	if getattr(app.state, "store", None) is None:
		app.state.store = ProfileStore(build_key_value_store(settings))
	yield


def create_app(store: Optional[ProfileStore] = None) -> FastAPI:
	app = FastAPI(title="Spark Encounters", version=__version__, lifespan=lifespan)
	# Tests hand in a store directly; the lifespan builds one otherwise.
	app.state.store = store
	obs_init(app)
	install_error_handlers(app)
	app.include_router(ops.router)
	app.include_router(profiles.router)
	app.include_router(proximity.router)
	return app


app = create_app()

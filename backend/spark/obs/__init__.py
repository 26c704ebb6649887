"""Observability package bootstrap."""

from __future__ import annotations

from fastapi import FastAPI

from spark.obs import logging as obs_logging
from spark.obs import middleware
from spark.settings import settings

_logging_configured = False


def init(app: FastAPI) -> None:
	"""Install request instrumentation on the app."""
	if not settings.obs_enabled:
		return
	middleware.install(app)


def configure_logging_once() -> None:
	global _logging_configured
	if _logging_configured or not settings.obs_enabled:
		return
	obs_logging.configure_logging()
	_logging_configured = True


__all__ = ["init", "configure_logging_once"]

"""Settings for the spark encounter service."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _env_field(default, *env_names: str):
	if env_names:
		alias = AliasChoices(*env_names) if len(env_names) > 1 else env_names[0]
		return Field(default=default, validation_alias=alias)
	return Field(default=default)


class Settings(BaseSettings):
	environment: str = _env_field("production", "ENV", "APP_ENV", "ENVIRONMENT")
	service_name: str = _env_field("spark", "SERVICE_NAME")
	git_commit: str = _env_field("unknown", "GIT_COMMIT", "COMMIT_SHA", "SOURCE_VERSION")
	obs_enabled: bool = _env_field(True, "OBS_ENABLED")
	obs_log_level: str = _env_field("INFO", "LOG_LEVEL")
	obs_log_sampling_rate_info: float = _env_field(1.0, "LOG_SAMPLING_RATE_INFO")

	# Persistence substrate for profiles and the per-user interest cache
	store_backend: Literal["memory", "file", "redis"] = _env_field("file", "STORE_BACKEND")
	store_path: Path = _env_field(Path.home() / ".spark" / "store", "STORE_PATH")
	redis_url: str = _env_field("redis://localhost:6379/0", "REDIS_URL")

	# Tag sessions: multi-tag re-poll delay and discovery timeout
	tag_retry_delay_seconds: float = _env_field(0.5, "TAG_RETRY_DELAY_SECONDS")
	tag_session_timeout_seconds: float = _env_field(60.0, "TAG_SESSION_TIMEOUT_SECONDS")

	# Argon2id parameters
	password_time_cost: int = _env_field(3, "PASSWORD_TIME_COST")
	password_memory_cost: int = _env_field(65536, "PASSWORD_MEMORY_COST")
	password_parallelism: int = _env_field(4, "PASSWORD_PARALLELISM")

	model_config = SettingsConfigDict(
		env_prefix="",
		env_file=".env",
		case_sensitive=False,
		extra="ignore",
	)

	@field_validator("obs_log_level", mode="before")
	def _normalise_level(cls, value):  # type: ignore[override]
		return str(value or "INFO").strip().upper()

	@field_validator("store_backend", mode="before")
	def _normalise_backend(cls, value):  # type: ignore[override]
		if value in (None, ""):
			return "file"
		return str(value).strip().lower()


settings = Settings()

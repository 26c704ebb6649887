"""Central registry for Prometheus metrics used across spark."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNTER = Counter(
	"spark_http_requests_total",
	"Total HTTP requests processed",
	["route", "method", "status"],
)

REQUEST_LATENCY = Histogram(
	"spark_http_request_duration_seconds",
	"HTTP request latency in seconds",
	["route", "method"],
	buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0),
)

TAG_SESSIONS = Counter(
	"spark_tag_sessions_total",
	"Tag sessions by mode and terminal outcome",
	["mode", "outcome"],
)

TAG_MULTI_TAG_RETRIES = Counter(
	"spark_tag_multi_tag_retries_total",
	"Discovery re-polls triggered by more than one tag in range",
)

PROFILES_CREATED = Counter(
	"spark_profiles_created_total",
	"Profiles created on sign-up",
)

PROFILE_REJECTS = Counter(
	"spark_profile_rejects_total",
	"Identity operations rejected by reason",
	["reason"],
)

AUTH_ATTEMPTS = Counter(
	"spark_auth_attempts_total",
	"Authentication attempts",
	["result"],
)

CONNECTIONS_RECORDED = Counter(
	"spark_connections_recorded_total",
	"Connections appended to a profile",
)

ENCOUNTERS = Counter(
	"spark_encounters_total",
	"Encounter flows by result",
	["result"],
)

STORE_PERSIST_FAILURES = Counter(
	"spark_store_persist_failures_total",
	"Persistence writes that failed and were not durably saved",
	["kind"],
)

STORE_LOAD_FAILURES = Counter(
	"spark_store_load_failures_total",
	"Persisted state that could not be read back and was treated as empty",
	["kind"],
)


def observe_request(route: str, method: str, status: int, elapsed_seconds: float) -> None:
	REQUEST_COUNTER.labels(route=route, method=method, status=str(status)).inc()
	REQUEST_LATENCY.labels(route=route, method=method).observe(elapsed_seconds)


def inc_tag_session(mode: str, outcome: str) -> None:
	TAG_SESSIONS.labels(mode=mode, outcome=outcome).inc()


def inc_multi_tag_retry() -> None:
	TAG_MULTI_TAG_RETRIES.inc()


def inc_profile_created() -> None:
	PROFILES_CREATED.inc()


def inc_profile_reject(reason: str) -> None:
	PROFILE_REJECTS.labels(reason=reason).inc()


def inc_auth_attempt(result: str) -> None:
	AUTH_ATTEMPTS.labels(result=result).inc()


def inc_connection_recorded() -> None:
	CONNECTIONS_RECORDED.inc()


def inc_encounter(result: str) -> None:
	ENCOUNTERS.labels(result=result).inc()


def inc_store_persist_failure(kind: str) -> None:
	STORE_PERSIST_FAILURES.labels(kind=kind).inc()


def inc_store_load_failure(kind: str) -> None:
	STORE_LOAD_FAILURES.labels(kind=kind).inc()

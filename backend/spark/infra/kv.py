"""Key/value persistence substrate.

The profile store only needs three primitives: load bytes for a key, save
bytes under a key, and delete a key. Backends:

- ``MemoryKeyValueStore``: process-local dict, used in tests and ephemeral runs.
- ``FileKeyValueStore``: one file per key under a directory, replaced atomically.
- ``RedisKeyValueStore``: plain GET/SET/DEL on a redis-py client (fakeredis in tests).

Backend failures surface as ``StoreBackendError`` so callers can treat them
uniformly.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Dict, Optional, Protocol

import redis

from spark.settings import Settings

logger = logging.getLogger(__name__)

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


class StoreBackendError(Exception):
	"""Raised when the substrate cannot read or write a key."""

	def __init__(self, key: str, message: str) -> None:
		super().__init__(f"{key}: {message}")
		self.key = key


class KeyValueStore(Protocol):
	def load(self, key: str) -> Optional[bytes]:
		...

	def save(self, key: str, value: bytes) -> None:
		...

	def delete(self, key: str) -> None:
		...


class MemoryKeyValueStore:
	def __init__(self, initial: Optional[Dict[str, bytes]] = None) -> None:
		self._data: Dict[str, bytes] = dict(initial or {})

	def load(self, key: str) -> Optional[bytes]:
		return self._data.get(key)

	def save(self, key: str, value: bytes) -> None:
		self._data[key] = bytes(value)

	def delete(self, key: str) -> None:
		self._data.pop(key, None)


class FileKeyValueStore:
	"""Stores each key as ``<root>/<key>.json``."""

	def __init__(self, root: Path) -> None:
		self._root = Path(root)

	def _path(self, key: str) -> Path:
		# Usernames end up in cache keys; keep file names portable.
		safe = _UNSAFE_KEY_CHARS.sub(lambda m: f"%{ord(m.group(0)):02X}", key)
		return self._root / f"{safe}.json"

	def load(self, key: str) -> Optional[bytes]:
		path = self._path(key)
		try:
			return path.read_bytes()
		except FileNotFoundError:
			return None
		except OSError as exc:
			raise StoreBackendError(key, str(exc)) from exc

	def save(self, key: str, value: bytes) -> None:
		path = self._path(key)
		try:
			path.parent.mkdir(parents=True, exist_ok=True)
			fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".tmp-", suffix=".json")
			try:
				with os.fdopen(fd, "wb") as handle:
					handle.write(value)
					handle.flush()
					os.fsync(handle.fileno())
				os.replace(tmp_name, path)
			except BaseException:
				Path(tmp_name).unlink(missing_ok=True)
				raise
		except OSError as exc:
			raise StoreBackendError(key, str(exc)) from exc

	def delete(self, key: str) -> None:
		try:
			self._path(key).unlink(missing_ok=True)
		except OSError as exc:
			raise StoreBackendError(key, str(exc)) from exc


class RedisKeyValueStore:
	def __init__(self, client: redis.Redis, *, namespace: str = "spark") -> None:
		self._client = client
		self._namespace = namespace

	def _key(self, key: str) -> str:
		return f"{self._namespace}:{key}"

	def load(self, key: str) -> Optional[bytes]:
		try:
			value = self._client.get(self._key(key))
		except redis.RedisError as exc:
			raise StoreBackendError(key, str(exc)) from exc
		if value is None:
			return None
		if isinstance(value, str):
			return value.encode("utf-8")
		return bytes(value)

	def save(self, key: str, value: bytes) -> None:
		try:
			self._client.set(self._key(key), value)
		except redis.RedisError as exc:
			raise StoreBackendError(key, str(exc)) from exc

	def delete(self, key: str) -> None:
		try:
			self._client.delete(self._key(key))
		except redis.RedisError as exc:
			raise StoreBackendError(key, str(exc)) from exc


def build_key_value_store(config: Settings) -> KeyValueStore:
	backend = config.store_backend
	if backend == "memory":
		logger.warning("using in-memory profile storage; nothing survives a restart")
		return MemoryKeyValueStore()
	if backend == "redis":
		return RedisKeyValueStore(redis.Redis.from_url(config.redis_url))
	return FileKeyValueStore(Path(config.store_path).expanduser())

import asyncio
import os
from typing import Any, List, Optional, Sequence

import pytest
import pytest_asyncio
from fakeredis import FakeRedis
from httpx import ASGITransport, AsyncClient

# Cheap hashing and no filesystem writes unless a test asks for them.
os.environ.setdefault("PASSWORD_TIME_COST", "1")
os.environ.setdefault("PASSWORD_MEMORY_COST", "8")
os.environ.setdefault("PASSWORD_PARALLELISM", "1")
os.environ.setdefault("STORE_BACKEND", "memory")

from spark.domain.identity.store import ProfileStore
from spark.domain.proximity.exceptions import TransportError
from spark.domain.proximity.models import TagCapability
from spark.infra.kv import MemoryKeyValueStore, RedisKeyValueStore
from spark.main import create_app


class FakeTransport:
	"""Scripted transport; each discover() pops the next entry from ``scans``.

	A scan entry may be a list of tags or an exception to raise.
	"""

	def __init__(
		self,
		scans: Optional[List[Any]] = None,
		*,
		capability: TagCapability = TagCapability.READ_WRITE,
		records: Optional[Sequence[bytes]] = None,
		available: bool = True,
	) -> None:
		self.scans = list(scans if scans is not None else [["tag-1"]])
		self.capability = capability
		self.records = records
		self._available = available
		self.calls: List[str] = []
		self.written: List[bytes] = []
		self.release_count = 0
		self.connect_error: Optional[Exception] = None
		self.query_error: Optional[Exception] = None
		self.read_error: Optional[Exception] = None
		self.write_error: Optional[Exception] = None
		self.discover_delay: Optional[float] = None
		self.in_flight = 0
		self.max_in_flight = 0

	@property
	def available(self) -> bool:
		return self._available

	async def discover(self) -> Sequence[Any]:
		self.calls.append("discover")
		self.in_flight += 1
		self.max_in_flight = max(self.max_in_flight, self.in_flight)
		try:
			if self.discover_delay is not None:
				await asyncio.sleep(self.discover_delay)
		finally:
			self.in_flight -= 1
		if not self.scans:
			raise TransportError("no scans scripted")
		scan = self.scans.pop(0)
		if isinstance(scan, Exception):
			raise scan
		return scan

	async def connect(self, tag: Any) -> None:
		self.calls.append("connect")
		if self.connect_error is not None:
			raise self.connect_error

	async def query_capability(self, tag: Any) -> TagCapability:
		self.calls.append("query_capability")
		if self.query_error is not None:
			raise self.query_error
		return self.capability

	async def read_message(self, tag: Any) -> Optional[Sequence[bytes]]:
		self.calls.append("read")
		if self.read_error is not None:
			raise self.read_error
		return self.records

	async def write_message(self, tag: Any, payload: bytes) -> None:
		self.calls.append("write")
		if self.write_error is not None:
			raise self.write_error
		self.written.append(payload)

	async def release(self) -> None:
		self.release_count += 1


@pytest.fixture
def memory_kv():
	return MemoryKeyValueStore()


@pytest.fixture
def store(memory_kv):
	return ProfileStore(memory_kv)


@pytest.fixture
def fake_redis():
	client = FakeRedis()
	try:
		yield client
	finally:
		client.flushall()


@pytest.fixture
def redis_kv(fake_redis):
	return RedisKeyValueStore(fake_redis, namespace="test")


@pytest.fixture
def make_transport():
	return FakeTransport


@pytest_asyncio.fixture
async def api_client(store):
	app = create_app(store=store)
	transport = ASGITransport(app=app)
	async with AsyncClient(transport=transport, base_url="http://testserver") as client:
		yield client

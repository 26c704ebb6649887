"""Abstract tag transport the session runner drives.

Implementations wrap a concrete radio stack. Every I/O method is a
coroutine; failures are reported with ``TransportError`` and a user
dismissing the discovery sheet with ``UserCancelledError``.
"""

from __future__ import annotations

from typing import Any, Optional, Protocol, Sequence

from spark.domain.proximity.models import TagCapability


class TagTransport(Protocol):
	@property
	def available(self) -> bool:
		"""Whether the device can run tag sessions at all."""
		...

	async def discover(self) -> Sequence[Any]:
		"""Poll until at least one tag is in range and return the tags seen."""
		...

	async def connect(self, tag: Any) -> None:
		...

	async def query_capability(self, tag: Any) -> TagCapability:
		...

	async def read_message(self, tag: Any) -> Optional[Sequence[bytes]]:
		"""Return the record payloads of the tag's message, or None when empty."""
		...

	async def write_message(self, tag: Any, payload: bytes) -> None:
		...

	async def release(self) -> None:
		"""Tear down the radio session; must be safe to call more than once."""
		...

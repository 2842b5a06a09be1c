"""Own the shared frame state and fan it out to websocket viewers."""

from __future__ import annotations

import asyncio
import dataclasses
import json
import logging
import threading
from typing import Any, List, Protocol, Set

from models.frame_state import FrameState

logger = logging.getLogger(__name__)


class Subscriber(Protocol):
	"""Anything that can receive a text frame, e.g. a Starlette ``WebSocket``."""

	async def send_text(self, data: str) -> None: ...


class BroadcastHub:
	"""Hold the single ``FrameState`` and push every change to all subscribers.

	The registry is copied before each fan-out so a viewer connecting or
	leaving mid-broadcast never disturbs the delivery in progress. Broadcasts
	are serialized, so each subscriber receives updates in call order. Each
	send is bounded by ``send_timeout_seconds``; a viewer that cannot keep up
	is dropped instead of holding up the next broadcast.
	"""

	def __init__(self, initial: FrameState | None = None, send_timeout_seconds: float = 5.0) -> None:
		self._state = initial or FrameState()
		self._send_timeout = send_timeout_seconds
		self._subscribers: Set[Subscriber] = set()
		self._registry_lock = threading.Lock()
		self._broadcast_lock = asyncio.Lock()

	@property
	def state(self) -> FrameState:
		return self._state

	def subscribe(self, connection: Subscriber) -> Subscriber:
		"""Register a viewer; it receives broadcasts from now on."""
		with self._registry_lock:
			self._subscribers.add(connection)
			total = len(self._subscribers)
		logger.info("Viewer subscribed. Total viewers: %d", total)
		return connection

	def unsubscribe(self, handle: Subscriber) -> None:
		"""Deregister a viewer. Unknown or already removed handles are ignored."""
		with self._registry_lock:
			if handle not in self._subscribers:
				return
			self._subscribers.discard(handle)
			total = len(self._subscribers)
		logger.info("Viewer unsubscribed. Total viewers: %d", total)

	def subscriber_count(self) -> int:
		with self._registry_lock:
			return len(self._subscribers)

	async def update_and_broadcast(self, **changes: Any) -> int:
		"""Replace the shared state with ``changes`` applied and send it to everyone.

		Returns:
			Number of subscribers the payload was delivered to. Send failures
			drop the subscriber and never raise to the caller.
		"""
		async with self._broadcast_lock:
			if changes:
				self._state = dataclasses.replace(self._state, **changes)
			message = json.dumps(self._state.to_payload())
			with self._registry_lock:
				targets: List[Subscriber] = list(self._subscribers)
			results = await asyncio.gather(*(self._send(connection, message) for connection in targets))
			sent = sum(results)
			logger.debug("Broadcast frame to %d/%d viewers", sent, len(targets))
			return sent

	async def _send(self, connection: Subscriber, message: str) -> bool:
		try:
			await asyncio.wait_for(connection.send_text(message), timeout=self._send_timeout)
			return True
		except asyncio.TimeoutError:
			logger.warning("Dropping viewer: send did not finish within %.1fs", self._send_timeout)
		except Exception as exc:
			logger.warning("Dropping viewer after failed send: %s", exc)
		self.unsubscribe(connection)
		return False

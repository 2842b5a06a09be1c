"""Fixed-window admission control keyed by (bucket, identity)."""

from __future__ import annotations

import logging
import threading
import time
from typing import Dict, Optional, Tuple

from models.session_models import RateLimitRecord

logger = logging.getLogger(__name__)


class RateLimiter:
	"""Count admissions per caller inside discrete windows.

	This is deliberately a fixed-window counter, not a sliding log or token
	bucket: up to ``2 * max_count`` requests can pass around a window boundary.
	"""

	def __init__(self, name: str = "default") -> None:
		self.name = name
		self._records: Dict[Tuple[str, str], RateLimitRecord] = {}
		self._lock = threading.Lock()

	def __len__(self) -> int:
		with self._lock:
			return len(self._records)

	def try_acquire(
		self,
		bucket: str,
		identity: str,
		window: float,
		max_count: int,
		now: Optional[float] = None,
	) -> bool:
		"""Admit one request if the caller is under ``max_count`` for the window.

		Args:
			bucket: Policy name, e.g. ``"login"`` or ``"ingest"``.
			identity: Caller identity, normally the client address.
			window: Window length in seconds.
			max_count: Admissions allowed per window.
			now: Override for the current time (seconds).

		Returns:
			True when admitted, False when rejected. A rejection never
			increments the counter.
		"""
		now = time.monotonic() if now is None else now
		key = (bucket, identity)
		with self._lock:
			record = self._records.get(key)
			if record is None or now - record.window_start > window:
				record = RateLimitRecord(window_start=now, count=0)
				self._records[key] = record
			if record.count >= max_count:
				admitted = False
			else:
				record.count += 1
				admitted = True
		if not admitted:
			logger.warning("Rate limit hit on %s/%s for %s", self.name, bucket, identity)
		return admitted

	def sweep(self, window: float, now: Optional[float] = None) -> int:
		"""Drop records whose window has fully elapsed and return the count."""
		now = time.monotonic() if now is None else now
		with self._lock:
			stale = [key for key, record in self._records.items() if now - record.window_start > window]
			for key in stale:
				del self._records[key]
		if stale:
			logger.debug("Swept %d idle rate-limit records from %s", len(stale), self.name)
		return len(stale)

"""Session and rate-limit records for the viewer and ingestion gates."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Session:
	"""Opaque login session; valid while ``now < expires_at``."""

	id: str
	expires_at: float

	def is_valid(self, now: float) -> bool:
		return now < self.expires_at


@dataclass
class RateLimitRecord:
	"""Fixed-window admission counter for one (bucket, identity) pair."""

	window_start: float
	count: int = 0

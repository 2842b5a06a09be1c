"""Simple in-memory store for viewer login sessions."""

from __future__ import annotations

import logging
import secrets
import threading
import time
from typing import Callable, Dict, Optional

from models.session_models import Session

logger = logging.getLogger(__name__)


class SessionStore:
	"""Issue, validate, and expire opaque session tokens.

	Entries are never renewed. An expired entry is removed the first time it
	fails validation, or by ``sweep`` which ``create`` runs once the store grows
	past ``sweep_threshold`` and the periodic cleanup task runs on a timer.
	"""

	def __init__(
		self,
		ttl_seconds: float = 3600.0,
		sweep_threshold: int = 1000,
		clock: Callable[[], float] = time.time,
	) -> None:
		if ttl_seconds <= 0:
			raise ValueError("Session TTL must be positive.")
		self.ttl_seconds = ttl_seconds
		self.sweep_threshold = sweep_threshold
		self._clock = clock
		self._sessions: Dict[str, Session] = {}
		self._lock = threading.Lock()

	def __len__(self) -> int:
		with self._lock:
			return len(self._sessions)

	def create(self, now: Optional[float] = None) -> str:
		"""Mint a new session and return its token."""
		now = self._clock() if now is None else now
		if len(self) > self.sweep_threshold:
			self.sweep(now)
		token = secrets.token_urlsafe(32)
		with self._lock:
			self._sessions[token] = Session(id=token, expires_at=now + self.ttl_seconds)
		return token

	def get(self, token: str) -> Optional[Session]:
		with self._lock:
			return self._sessions.get(token)

	def validate(self, token: Optional[str], now: Optional[float] = None) -> bool:
		"""Return True only for a known, unexpired token; drop it if expired."""
		if not token:
			return False
		now = self._clock() if now is None else now
		with self._lock:
			session = self._sessions.get(token)
			if session is None:
				return False
			if session.is_valid(now):
				return True
			del self._sessions[token]
		logger.debug("Session expired and removed")
		return False

	def revoke(self, token: Optional[str]) -> None:
		"""Forget a session, e.g. on logout. Unknown tokens are ignored."""
		if not token:
			return
		with self._lock:
			self._sessions.pop(token, None)

	def sweep(self, now: Optional[float] = None) -> int:
		"""Remove every expired session and return how many were dropped."""
		now = self._clock() if now is None else now
		with self._lock:
			expired = [token for token, session in self._sessions.items() if not session.is_valid(now)]
			for token in expired:
				del self._sessions[token]
		if expired:
			logger.debug("Swept %d expired sessions", len(expired))
		return len(expired)

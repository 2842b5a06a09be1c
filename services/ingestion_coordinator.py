"""Orchestrate frame uploads, viewer logins, and the shared live state.

One ``IngestionCoordinator`` is built at startup and reached from every
request handler through ``app.state.coordinator``. It owns all process-wide
mutable state: sessions, both rate limiters, the alert cooldown, the gallery,
and the broadcast hub.
"""

from __future__ import annotations

import asyncio
import hmac
import logging
import time
from dataclasses import dataclass
from typing import List, Optional, Set

from models.frame_state import DetectionLabel, FrameState
from services.alert_gate import AlertGate
from services.auth.rate_limiter import RateLimiter
from services.auth.session_store import SessionStore
from services.image_transform import ImageRotator
from services.notifier.telegram_notifier import DisabledNotifier, Notifier
from services.realtime.broadcast_hub import BroadcastHub
from services.snapshot_gallery import SnapshotGallery
from utils.errors import AuthError, NotFoundError, RateLimitError, UpstreamError, ValidationError
from utils.settings import Settings

logger = logging.getLogger(__name__)

LOGIN_BUCKET = "login"
INGEST_BUCKET = "ingest"
VIDEO_BUCKET = "video"


@dataclass
class IngestResult:
    """Outcome of one accepted frame."""

    labels: List[DetectionLabel]
    alert: Optional[DetectionLabel]
    noteworthy: bool
    delivered: int


class IngestionCoordinator:
    """Run each upload through rate limit, auth, transform, classify, alert, gallery, broadcast."""

    def __init__(
        self,
        settings: Settings,
        classifier,
        notifier: Optional[Notifier] = None,
        rotator: Optional[ImageRotator] = None,
    ) -> None:
        self.settings = settings
        self.classifier = classifier
        self.notifier = notifier or DisabledNotifier()
        self.rotator = rotator or ImageRotator()
        self.sessions = SessionStore(settings.session_ttl_seconds, settings.session_sweep_threshold)
        self.login_limiter = RateLimiter("login")
        self.ingest_limiter = RateLimiter("ingest")
        self.alert_gate = AlertGate(settings.alert_targets, settings.alert_cooldown_seconds)
        self.gallery = SnapshotGallery(settings.gallery_capacity)
        self.hub = BroadcastHub(
            FrameState(ai_enabled=settings.ai_enabled),
            send_timeout_seconds=settings.broadcast_send_timeout_seconds,
        )
        self._state_lock = asyncio.Lock()
        self._pending: Set[asyncio.Task] = set()

    def login(self, password: str, identity: str, now: Optional[float] = None) -> str:
        """Check the shared password and mint a session token.

        Raises:
            RateLimitError: Too many attempts from ``identity`` in the window.
            AuthError: Wrong password.
        """
        if not self.login_limiter.try_acquire(
            LOGIN_BUCKET,
            identity,
            self.settings.login_window_seconds,
            self.settings.login_limit_max,
            now=now,
        ):
            raise RateLimitError("Too many login attempts. Try again later.")
        if not _constant_time_equals(password, self.settings.password):
            logger.warning("Failed login from %s", identity)
            raise AuthError("Invalid password.")
        logger.info("Viewer logged in from %s", identity)
        return self.sessions.create()

    def require_session(self, token: Optional[str]) -> None:
        if not self.sessions.validate(token):
            raise AuthError("Unauthorized")

    def admit_upload(self, identity: str, api_key: Optional[str], bucket: str = INGEST_BUCKET) -> None:
        """Apply the ingestion rate limit, then the API key check."""
        if not self.ingest_limiter.try_acquire(
            bucket,
            identity,
            self.settings.upload_window_seconds,
            self.settings.upload_limit_max,
        ):
            raise RateLimitError("Upload rate limit exceeded.")
        expected = self.settings.api_key
        if not expected or not _constant_time_equals(api_key, expected):
            logger.warning("Rejected upload from %s: bad API key", identity)
            raise AuthError("Invalid API key.")

    async def ingest_frame(self, image: bytes, edge_detected: bool = False) -> IngestResult:
        """Process one admitted frame and broadcast the resulting state.

        Raises:
            ValidationError: Empty body.
            UpstreamError: Classifier failure; the raw frame has already been
                broadcast with the previous labels.
        """
        if not image:
            raise ValidationError("Image body is empty.")
        logger.info("Received image. Size: %d bytes", len(image))

        image = await self._maybe_rotate(image)

        if self.hub.state.ai_enabled:
            try:
                labels = list(await self.classifier.classify(image))
            except Exception as exc:
                logger.error("Error in label detection: %s", exc)
                # Still broadcast the frame, with the previous labels
                async with self._state_lock:
                    await self.hub.update_and_broadcast(image=image, edge_detected=edge_detected)
                if isinstance(exc, UpstreamError):
                    raise
                raise UpstreamError(f"Label detection failed: {exc}") from exc
        else:
            labels = []

        async with self._state_lock:
            alert = self.alert_gate.evaluate(labels)
            noteworthy = edge_detected or self.alert_gate.match(labels) is not None
            self.gallery.insert_if_noteworthy(image, labels, noteworthy)
            delivered = await self.hub.update_and_broadcast(
                image=image,
                labels=tuple(labels),
                edge_detected=edge_detected,
                gallery=tuple(self.gallery.list()),
            )

        if alert is not None:
            self._schedule(self._notify_photo(image, self.alert_gate.caption_for(alert)))
        return IngestResult(labels=labels, alert=alert, noteworthy=noteworthy, delivered=delivered)

    async def ingest_video(self, clip: bytes, caption: Optional[str] = None) -> bool:
        """Forward an admitted clip to the operator. Failures are logged, not raised."""
        if not clip:
            raise ValidationError("Video body is empty.")
        logger.info("Received video clip. Size: %d bytes", len(clip))
        caption = caption or f"Motion clip captured at {time.strftime('%H:%M:%S')}"
        try:
            return await self.notifier.notify_video(clip, caption)
        except Exception as exc:
            logger.warning("Video notification failed: %s", exc)
            return False

    def last_image(self) -> bytes:
        """Return the most recent frame.

        Raises:
            NotFoundError: No frame has been received yet.
        """
        image = self.hub.state.image
        if not image:
            raise NotFoundError("No image received yet")
        return image

    async def toggle_ai(self, enabled: Optional[bool] = None) -> bool:
        """Flip (or set) the AI flag and broadcast it. Returns the new value."""
        async with self._state_lock:
            value = (not self.hub.state.ai_enabled) if enabled is None else bool(enabled)
            await self.hub.update_and_broadcast(ai_enabled=value)
        logger.info("AI labeling %s", "enabled" if value else "disabled")
        return value

    def sweep(self) -> int:
        """Evict expired sessions and idle rate-limit records."""
        removed = self.sessions.sweep()
        removed += self.login_limiter.sweep(self.settings.login_window_seconds)
        removed += self.ingest_limiter.sweep(self.settings.upload_window_seconds)
        return removed

    async def wait_for_notifications(self) -> None:
        """Wait for every scheduled alert delivery to finish."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _maybe_rotate(self, image: bytes) -> bytes:
        degrees = self.settings.rotate_degrees
        if not degrees:
            return image
        try:
            return await self.rotator.rotate_async(image, degrees)
        except UpstreamError as exc:
            logger.warning("Rotation failed, keeping original frame: %s", exc)
            return image

    async def _notify_photo(self, image: bytes, caption: str) -> None:
        try:
            delivered = await self.notifier.notify_photo(image, caption)
        except Exception as exc:
            logger.warning("Photo notification failed: %s", exc)
            return
        if not delivered:
            logger.warning("Photo notification not delivered: %s", caption)

    def _schedule(self, coro) -> None:
        task = asyncio.create_task(coro)
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)


def _constant_time_equals(given: Optional[str], expected: str) -> bool:
    if given is None:
        return False
    return hmac.compare_digest(given.encode("utf-8"), expected.encode("utf-8"))

"""Shared fixtures: fake collaborators and a wired coordinator."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import List, Optional

import pytest

from models.frame_state import DetectionLabel
from services.ingestion_coordinator import IngestionCoordinator
from utils.errors import UpstreamError
from utils.settings import Settings

API_KEY = "camera-secret"
PASSWORD = "hunter2"
JPEG = b"\xff\xd8\xff\xe0fake-jpeg-payload\xff\xd9"


class FakeClassifier:
    """Returns canned labels, or raises when ``error`` is set."""

    def __init__(self, labels: Optional[List[DetectionLabel]] = None) -> None:
        self.labels = labels or []
        self.error: Optional[Exception] = None
        self.calls: List[bytes] = []

    async def classify(self, image_bytes: bytes) -> List[DetectionLabel]:
        self.calls.append(image_bytes)
        if self.error is not None:
            raise self.error
        return list(self.labels)


class FakeNotifier:
    """Records deliveries; ``fail`` makes every send report failure."""

    def __init__(self, fail: bool = False, raises: bool = False) -> None:
        self.fail = fail
        self.raises = raises
        self.photos: List[tuple] = []
        self.videos: List[tuple] = []

    async def notify_photo(self, image: bytes, caption: str) -> bool:
        self.photos.append((image, caption))
        if self.raises:
            raise RuntimeError("telegram down")
        return not self.fail

    async def notify_video(self, video: bytes, caption: str) -> bool:
        self.videos.append((video, caption))
        if self.raises:
            raise RuntimeError("telegram down")
        return not self.fail

    async def aclose(self) -> None:
        return None


class FakeSubscriber:
    """Collects broadcast text frames; ``broken`` makes every send fail."""

    def __init__(self, broken: bool = False) -> None:
        self.broken = broken
        self.messages: List[str] = []

    async def send_text(self, data: str) -> None:
        if self.broken:
            raise ConnectionError("peer went away")
        self.messages.append(data)


class StalledSubscriber:
    """A viewer whose socket never drains: every send waits forever."""

    def __init__(self) -> None:
        self.attempts = 0

    async def send_text(self, data: str) -> None:
        self.attempts += 1
        await asyncio.Event().wait()


class FakeClock:
    def __init__(self, now: float = 1_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def public_dir(tmp_path: Path) -> Path:
    (tmp_path / "index.html").write_text("<html>viewer</html>")
    (tmp_path / "login.html").write_text("<html>login</html>")
    return tmp_path


@pytest.fixture
def settings(public_dir: Path) -> Settings:
    return Settings(
        password=PASSWORD,
        api_key=API_KEY,
        alert_targets=("person", "dog"),
        alert_cooldown_ms=60_000,
        upload_limit_window_ms=1000,
        upload_limit_max=1,
        login_limit_max=3,
        broadcast_send_timeout_seconds=0.05,
        public_dir=public_dir,
    )


@pytest.fixture
def classifier() -> FakeClassifier:
    return FakeClassifier([DetectionLabel("Person", 0.95), DetectionLabel("Tree", 0.8)])


@pytest.fixture
def notifier() -> FakeNotifier:
    return FakeNotifier()


@pytest.fixture
def coordinator(settings: Settings, classifier: FakeClassifier, notifier: FakeNotifier) -> IngestionCoordinator:
    return IngestionCoordinator(settings, classifier, notifier=notifier)


@pytest.fixture
def upstream_error() -> UpstreamError:
    return UpstreamError("quota exceeded")

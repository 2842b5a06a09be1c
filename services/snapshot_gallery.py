"""Bounded newest-first gallery of noteworthy frames."""

from __future__ import annotations

import threading
import time
from collections import deque
from typing import Deque, List, Optional, Sequence

from models.frame_state import DetectionLabel, Snapshot

EDGE_ONLY_SUMMARY = "Edge detected"


def summarize_labels(labels: Sequence[DetectionLabel], limit: int = 3) -> str:
    """Return up to ``limit`` label descriptions joined for display."""
    names = [label.description for label in labels[:limit] if label.description]
    return ", ".join(names) if names else EDGE_ONLY_SUMMARY


class SnapshotGallery:
    """Keep the ``capacity`` most recent noteworthy frames.

    Insertion is always at the front and exactly one tail entry is evicted
    when the cap is exceeded. There is no deduplication and no key lookup.
    """

    def __init__(self, capacity: int = 10) -> None:
        if capacity < 1:
            raise ValueError("Gallery capacity must be at least 1.")
        self.capacity = capacity
        self._items: Deque[Snapshot] = deque()
        self._last_id = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)

    def insert_if_noteworthy(
        self,
        image: bytes,
        labels: Sequence[DetectionLabel],
        is_noteworthy: bool,
        now: Optional[float] = None,
    ) -> Optional[Snapshot]:
        """Add a snapshot of the frame when ``is_noteworthy``; return it or None."""
        if not is_noteworthy:
            return None
        now = time.time() if now is None else now
        with self._lock:
            snapshot_id = max(int(now * 1000), self._last_id + 1)
            self._last_id = snapshot_id
            snapshot = Snapshot(
                id=snapshot_id,
                time=time.strftime("%H:%M:%S", time.localtime(now)),
                image=image,
                label_summary=summarize_labels(labels),
            )
            self._items.appendleft(snapshot)
            if len(self._items) > self.capacity:
                self._items.pop()
        return snapshot

    def list(self) -> List[Snapshot]:
        """Return the snapshots, newest first."""
        with self._lock:
            return list(self._items)

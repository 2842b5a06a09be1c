"""Cooldown-gated decision on whether to notify the operator."""

from __future__ import annotations

import threading
import time
from typing import Iterable, Optional, Sequence

from models.frame_state import DetectionLabel


class AlertGate:
    """Match detected labels against operator targets, at most once per cooldown.

    Args:
        targets: Ordered, case-insensitive substrings the operator cares about.
        cooldown_seconds: Minimum time between two fired alerts.
    """

    def __init__(self, targets: Iterable[str], cooldown_seconds: float = 60.0) -> None:
        self.targets = tuple(t.strip().lower() for t in targets if t and t.strip())
        self.cooldown_seconds = cooldown_seconds
        self.last_fired_at: Optional[float] = None
        self._lock = threading.Lock()

    def match(self, labels: Sequence[DetectionLabel]) -> Optional[DetectionLabel]:
        """Return the first label whose description contains any target."""
        if not self.targets:
            return None
        for label in labels:
            description = (label.description or "").lower()
            if any(target in description for target in self.targets):
                return label
        return None

    def evaluate(self, labels: Sequence[DetectionLabel], now: Optional[float] = None) -> Optional[DetectionLabel]:
        """Return the label to alert on, or None when nothing matches or cooling down.

        The cooldown starts here, at decision time. A notification that later
        fails or stalls does not reopen the gate.
        """
        now = time.monotonic() if now is None else now
        detected = self.match(labels)
        if detected is None:
            return None
        with self._lock:
            if self.last_fired_at is not None and now - self.last_fired_at < self.cooldown_seconds:
                return None
            self.last_fired_at = now
        return detected

    def caption_for(self, label: DetectionLabel) -> str:
        return f"Alert: {label.description} detected ({label.score:.0%} confidence)"

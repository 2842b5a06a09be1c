from __future__ import annotations

import base64
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class DetectionLabel:
    """One classifier result.

    Attributes:
        description: Human readable label text, e.g. ``"Person"``.
        score: Confidence in ``[0, 1]``.
    """

    description: str
    score: float

    def to_dict(self) -> Dict[str, Any]:
        return {"description": self.description, "score": self.score}


@dataclass(frozen=True)
class Snapshot:
    """A retained noteworthy frame shown in the viewer gallery.

    Attributes:
        id: Strictly increasing identifier derived from the capture time in ms.
        time: Human readable capture time (``HH:MM:SS``).
        image: JPEG bytes of the frame.
        label_summary: Short text describing why the frame was kept.
    """

    id: int
    time: str
    image: bytes
    label_summary: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "time": self.time,
            "image": base64.b64encode(self.image).decode("ascii"),
            "labels": self.label_summary,
        }


@dataclass(frozen=True)
class FrameState:
    """The single current view broadcast to every viewer.

    Instances are never mutated; updates build a new state with
    ``dataclasses.replace`` so readers always see one consistent frame.
    """

    image: Optional[bytes] = None
    labels: Tuple[DetectionLabel, ...] = ()
    ai_enabled: bool = True
    edge_detected: bool = False
    gallery: Tuple[Snapshot, ...] = field(default_factory=tuple)

    def to_payload(self) -> Dict[str, Any]:
        """Return the JSON-serializable ``frame`` message for subscribers."""
        image_b64 = base64.b64encode(self.image).decode("ascii") if self.image else None
        return {
            "type": "frame",
            "image": image_b64,
            "labels": [label.to_dict() for label in self.labels],
            "aiEnabled": self.ai_enabled,
            "edgeDetected": self.edge_detected,
            "gallery": [snapshot.to_dict() for snapshot in self.gallery],
        }

    def labels_as_dicts(self) -> List[Dict[str, Any]]:
        return [label.to_dict() for label in self.labels]

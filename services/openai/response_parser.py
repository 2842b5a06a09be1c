"""Helpers to parse Responses API outputs."""

import json
from typing import Any, List

from models.frame_state import DetectionLabel


def _clamp_score(raw: Any) -> float:
    try:
        score = float(raw)
    except (TypeError, ValueError):
        return 0.0
    return min(max(score, 0.0), 1.0)


def parse_labels(response: Any, *, tool_name: str, limit: int = 10) -> List[DetectionLabel]:
    """Extract detection labels from the function call for ``tool_name``.

    Labels are returned highest score first, blanks dropped, scores clamped
    into ``[0, 1]``.
    """
    for item in getattr(response, "output", []):
        if getattr(item, "type", None) == "function_call" and getattr(item, "name", None) == tool_name:
            args = json.loads(getattr(item, "arguments", "{}") or "{}")
            labels = []
            for entry in args.get("labels") or []:
                description = str(entry.get("description") or "").strip()
                if description:
                    labels.append(DetectionLabel(description=description, score=_clamp_score(entry.get("score"))))
            labels.sort(key=lambda label: label.score, reverse=True)
            return labels[:limit]
    raise RuntimeError(f"No function_call output for '{tool_name}' found in Responses API output.")

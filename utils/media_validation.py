"""Validation helpers for uploaded camera media."""

from typing import Optional

from fastapi import Request

from utils.errors import ValidationError

_TRUE_FLAGS = {"1", "true", "yes", "on"}


def parse_flag(value: Optional[str]) -> bool:
    """Interpret a header such as ``X-Edge-Detected: 1`` as a boolean."""
    return (value or "").strip().lower() in _TRUE_FLAGS


async def read_limited_body(request: Request, max_bytes: int) -> bytes:
    """Accumulate the raw request body, rejecting empty or oversized uploads.

    Raises:
        ValidationError: If the body is empty or exceeds ``max_bytes``.
    """
    chunks = []
    total = 0
    async for chunk in request.stream():
        total += len(chunk)
        if total > max_bytes:
            raise ValidationError(f"Upload too large. Max {max_bytes} bytes")
        chunks.append(chunk)
    body = b"".join(chunks)
    if not body:
        raise ValidationError("Upload body is empty.")
    return body

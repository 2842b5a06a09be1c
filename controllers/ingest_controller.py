"""Frame and clip uploads from the camera device."""

from typing import Any, Dict, List

from fastapi import HTTPException, Request

from controllers.auth_controller import client_identity, get_coordinator
from services.ingestion_coordinator import INGEST_BUCKET, VIDEO_BUCKET
from utils.errors import CoordinatorError
from utils.media_validation import parse_flag, read_limited_body

API_KEY_HEADER = "x-api-key"
EDGE_HEADER = "x-edge-detected"
CAPTION_HEADER = "x-caption"


async def upload_image(request: Request) -> List[Dict[str, Any]]:
    """Handle one JPEG upload end to end.

    The rate limit and API key are checked before the body is read. A
    classifier failure still broadcasts the raw frame before the 500.

    Returns:
        The detected labels, highest score first, as the camera expects them.
    """
    coordinator = get_coordinator(request)
    try:
        coordinator.admit_upload(client_identity(request), request.headers.get(API_KEY_HEADER), INGEST_BUCKET)
        image = await read_limited_body(request, coordinator.settings.max_upload_bytes)
        result = await coordinator.ingest_frame(image, edge_detected=parse_flag(request.headers.get(EDGE_HEADER)))
    except CoordinatorError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc

    return [label.to_dict() for label in result.labels]


async def upload_video(request: Request) -> Dict[str, Any]:
    """Forward a short clip to the operator channel (best effort)."""
    coordinator = get_coordinator(request)
    try:
        coordinator.admit_upload(client_identity(request), request.headers.get(API_KEY_HEADER), VIDEO_BUCKET)
        clip = await read_limited_body(request, coordinator.settings.max_upload_bytes)
        sent = await coordinator.ingest_video(clip, request.headers.get(CAPTION_HEADER))
    except CoordinatorError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
    return {"sent": sent}

"""Protected reads and controls over the live frame state."""

from typing import Any, Dict, List, Optional

from fastapi import HTTPException, Request
from fastapi.responses import Response

from controllers.auth_controller import get_coordinator
from utils.errors import NotFoundError


async def get_last_image(request: Request) -> Response:
    """Return the most recent frame as JPEG.

    Raises:
        HTTPException(404) if no frame has been received yet.
    """
    try:
        image = get_coordinator(request).last_image()
    except NotFoundError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc
    return Response(content=image, media_type="image/jpeg")


async def get_labels(request: Request) -> List[Dict[str, Any]]:
    return get_coordinator(request).hub.state.labels_as_dicts()


async def get_gallery(request: Request) -> List[Dict[str, Any]]:
    """Return the retained snapshots, newest first."""
    return [snapshot.to_dict() for snapshot in get_coordinator(request).gallery.list()]


async def toggle_ai(request: Request, enabled: Optional[bool] = None) -> Dict[str, Any]:
    """Flip (or explicitly set) AI labeling and broadcast the change."""
    value = await get_coordinator(request).toggle_ai(enabled)
    return {"aiEnabled": value}

"""FastAPI routes for the protected viewer surface."""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import FileResponse, RedirectResponse
from pydantic import BaseModel

from controllers.auth_controller import get_coordinator, is_authorized, require_viewer
from controllers.frame_controller import get_gallery, get_labels, get_last_image, toggle_ai

router = APIRouter()


class TogglePayload(BaseModel):
    enabled: Optional[bool] = None


@router.get("/", include_in_schema=False)
async def serve_index(request: Request):
    """Serve the viewer page, redirecting unauthenticated browsers to /login."""
    if not is_authorized(request):
        return RedirectResponse("/login", status_code=302)
    index_path = get_coordinator(request).settings.public_dir / "index.html"
    if not index_path.exists():
        raise HTTPException(status_code=500, detail="Error loading index.html")
    return FileResponse(index_path)


@router.get("/index.html", include_in_schema=False)
async def serve_index_alias(request: Request):
    return await serve_index(request)


@router.get("/saveImage.jpg", dependencies=[Depends(require_viewer)])
async def last_image_route(request: Request):
    """Return the latest JPEG frame."""
    try:
        return await get_last_image(request)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.get("/labels", dependencies=[Depends(require_viewer)])
async def labels_route(request: Request):
    try:
        return await get_labels(request)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.get("/gallery", dependencies=[Depends(require_viewer)])
async def gallery_route(request: Request):
    try:
        return await get_gallery(request)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.post("/toggle-ai", dependencies=[Depends(require_viewer)])
async def toggle_ai_route(request: Request, payload: Optional[TogglePayload] = None):
    """Flip AI labeling, or set it when ``{"enabled": bool}`` is sent."""
    try:
        return await toggle_ai(request, payload.enabled if payload else None)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))

"""FastAPI routes for camera uploads (API key protected)."""

from fastapi import APIRouter, HTTPException, Request

from controllers.ingest_controller import upload_image, upload_video

router = APIRouter()


@router.post("/imageUpdate")
async def image_update_route(request: Request):
    """Accept a raw JPEG body from the camera and return its labels."""
    try:
        return await upload_image(request)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.post("/videoUpdate")
async def video_update_route(request: Request):
    """Accept a raw MP4 clip and forward it to the operator."""
    try:
        return await upload_video(request)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))

"""FastAPI routes for viewer login and logout."""

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse

from controllers.auth_controller import get_coordinator, login, logout, session_status

router = APIRouter()


@router.get("/login", include_in_schema=False)
async def login_page(request: Request):
    """Serve the login page from the public directory."""
    page = get_coordinator(request).settings.public_dir / "login.html"
    if not page.exists():
        raise HTTPException(status_code=500, detail="Error loading login.html")
    return FileResponse(page)


@router.post("/login")
async def login_route(request: Request):
    try:
        return await login(request)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.post("/logout")
async def logout_route(request: Request):
    try:
        return await logout(request)
    except HTTPException:
        raise
    except Exception as exc:
        raise HTTPException(status_code=500, detail=str(exc))


@router.get("/session")
async def session_route(request: Request):
    """Report whether the caller's cookie is still a valid session."""
    return session_status(request)

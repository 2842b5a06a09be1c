"""Viewer login, logout, and session checks."""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from services.ingestion_coordinator import IngestionCoordinator
from utils.errors import CoordinatorError

COOKIE_NAME = "cameraview_auth"


class LoginPayload(BaseModel):
    password: str


def get_coordinator(request: Request) -> IngestionCoordinator:
    """Retrieve the shared coordinator from the app state."""
    coordinator = getattr(request.app.state, "coordinator", None)
    if coordinator is None:
        raise HTTPException(status_code=500, detail="Coordinator not initialized.")
    return coordinator


def client_identity(request: Request) -> str:
    """Return the caller address used as the rate-limit identity.

    The first ``X-Forwarded-For`` hop is only honoured when ``TRUST_PROXY``
    is enabled, otherwise any client could pick its own identity.
    """
    coordinator = get_coordinator(request)
    if coordinator.settings.trust_proxy:
        forwarded = request.headers.get("x-forwarded-for", "")
        first_hop = forwarded.split(",", 1)[0].strip()
        if first_hop:
            return first_hop
    return request.client.host if request.client else "unknown"


def is_authorized(request: Request) -> bool:
    """Return True when the request carries a valid session cookie."""
    return get_coordinator(request).sessions.validate(request.cookies.get(COOKIE_NAME))


def require_viewer(request: Request) -> None:
    """FastAPI dependency guarding viewer-only endpoints."""
    try:
        get_coordinator(request).require_session(request.cookies.get(COOKIE_NAME))
    except CoordinatorError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc


async def login(request: Request) -> JSONResponse:
    """Validate the password and set the session cookie.

    Returns:
        200 with ``{"success": true}`` and the cookie, or raises
        HTTPException 400 (bad body), 401 (wrong password), 429 (limited).
    """
    coordinator = get_coordinator(request)
    raw = await request.body()
    try:
        payload = LoginPayload.model_validate_json(raw or b"{}")
    except PydanticValidationError as exc:
        raise HTTPException(status_code=400, detail="Bad Request") from exc

    try:
        token = coordinator.login(payload.password, client_identity(request))
    except CoordinatorError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.detail) from exc

    response = JSONResponse({"success": True})
    response.set_cookie(
        COOKIE_NAME,
        token,
        max_age=int(coordinator.settings.session_ttl_seconds),
        path="/",
        httponly=True,
        samesite="strict",
        secure=coordinator.settings.cookie_secure,
    )
    return response


async def logout(request: Request) -> JSONResponse:
    """Revoke the current session, if any, and clear the cookie."""
    token: Optional[str] = request.cookies.get(COOKIE_NAME)
    get_coordinator(request).sessions.revoke(token)
    response = JSONResponse({"success": True})
    response.delete_cookie(COOKIE_NAME, path="/")
    return response


def session_status(request: Request) -> Dict[str, Any]:
    return {"authenticated": is_authorized(request)}

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, HTTPException, Request
from fastapi.staticfiles import StaticFiles
from openai import AsyncOpenAI

from controllers.auth_controller import is_authorized
from routes.auth_route import router as auth_router
from routes.frame_route import router as frame_router
from routes.ingest_route import router as ingest_router
from routes.realtime_ws import router as realtime_router
from services.image_transform import ImageRotator
from services.ingestion_coordinator import IngestionCoordinator
from services.notifier.telegram_notifier import build_notifier
from services.openai.label_classifier import LabelClassifier
from utils.settings import Settings
from utils.state_cleaner import StateCleaner

from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file if present

logger = logging.getLogger(__name__)


def _build_openai_client() -> Optional[AsyncOpenAI]:
    try:
        return AsyncOpenAI()
    except Exception as exc:
        # Missing OPENAI_API_KEY: uploads still broadcast, classification returns 500.
        logger.warning("OpenAI client unavailable: %s", exc)
        return None


def build_coordinator(settings: Settings, http_client: Optional[httpx.AsyncClient] = None) -> IngestionCoordinator:
    """Wire the production collaborators into a fresh coordinator."""
    classifier = LabelClassifier(
        _build_openai_client(),
        model=settings.classifier_model,
        timeout_seconds=settings.classifier_timeout_seconds,
        max_labels=settings.classifier_max_labels,
    )
    notifier = build_notifier(
        settings.telegram_bot_token,
        settings.telegram_chat_id,
        timeout_seconds=settings.notifier_timeout_seconds,
        client=http_client,
    )
    return IngestionCoordinator(settings, classifier, notifier=notifier, rotator=ImageRotator())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - the shared HTTP client used by the notifier
      - the coordinator (unless a test already attached one)
      - the periodic session / rate-limit cleanup task
    and attach them to `app.state`.
    """
    settings: Settings = app.state.settings
    http_client = httpx.AsyncClient(timeout=settings.notifier_timeout_seconds)
    if getattr(app.state, "coordinator", None) is None:
        app.state.coordinator = build_coordinator(settings, http_client)
    coordinator: IngestionCoordinator = app.state.coordinator

    if not settings.api_key:
        logger.warning("API_KEY is not set; every camera upload will be rejected")

    cleaner = StateCleaner(coordinator, settings.cleanup_interval_seconds)
    cleanup_task = asyncio.create_task(cleaner.run_periodic_cleanup())

    try:
        yield
    finally:
        cleanup_task.cancel()
        try:
            await cleanup_task
        except asyncio.CancelledError:
            pass
        await coordinator.wait_for_notifications()
        await coordinator.notifier.aclose()
        await http_client.aclose()


def create_app(settings: Optional[Settings] = None, coordinator: Optional[IngestionCoordinator] = None) -> FastAPI:
    """
    Create and configure the FastAPI application instance.
    """
    settings = settings or Settings.from_env()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(lifespan=lifespan)
    app.state.settings = settings
    app.state.coordinator = coordinator

    # Serve static assets from the public directory, if it exists.
    if settings.public_dir.exists():
        app.mount("/public", StaticFiles(directory=settings.public_dir), name="public")

    @app.get("/health")
    async def health(request: Request):
        """
        Simple health check reporting coordinator presence and viewer count.
        """
        current = getattr(request.app.state, "coordinator", None)
        return {
            "ok": True,
            "coordinator_ready": current is not None,
            "viewers": current.hub.subscriber_count() if current is not None else 0,
        }

    # Register application routers
    app.include_router(auth_router)
    app.include_router(ingest_router)
    app.include_router(frame_router)
    app.include_router(realtime_router)

    @app.api_route(
        "/{path:path}",
        methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
        include_in_schema=False,
    )
    async def unhandled(request: Request, path: str):
        """Anything else: 401 for anonymous callers, 405 otherwise."""
        if not is_authorized(request):
            raise HTTPException(status_code=401, detail="Unauthorized")
        logger.info("Received unhandled request: %s %s", request.method, request.url.path)
        raise HTTPException(status_code=405, detail="Method Not Allowed")

    return app


app = create_app()

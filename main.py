import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from openai import AsyncOpenAI

from dal.image_dal import ImageDAL
from routes.image_route import router as image_router
from routes.upload_route import router as upload_router
from services.errors import ImageServiceError
from services.image_service import DetectionStorageService
from services.media_storage import LocalMediaStorage, MediaStorage, RemoteMediaStorage
from services.openai.object_detector import ObjectDetector
from utils.config import AppConfig
from utils.database_init import AsyncDatabaseInitializer

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager to initialize:
      - the SQLite image store (at DATABASE_DIR/images.db, kept across restarts)
      - the media storage backend (local media dir or remote storage service)
      - the optional OpenAI async client used for object detection
    and attach them to `app.state`.
    """
    config: AppConfig = getattr(app.state, "config", None) or AppConfig.from_env()
    logging.basicConfig(level=config.log_level)
    app.state.config = config

    db_initializer = AsyncDatabaseInitializer(config.db_path)
    await db_initializer.ensure_database()
    app.state.db_initializer = db_initializer

    http_client: Optional[httpx.AsyncClient] = None
    storage: MediaStorage
    if config.storage_service_url:
        http_client = httpx.AsyncClient(timeout=config.storage_timeout)
        storage = RemoteMediaStorage(config.upload_dir, config.storage_service_url, http_client)
        logger.info("Using remote storage service at %s", config.storage_service_url)
    else:
        storage = LocalMediaStorage(config.upload_dir, config.media_dir, config.public_base_url)
        app.mount("/media", StaticFiles(directory=config.media_dir), name="media")
        logger.info("Serving media from %s", config.media_dir)
    app.state.media_storage = storage

    openai_client: Optional[AsyncOpenAI] = None
    detector: Optional[ObjectDetector] = None
    if config.openai_api_key:
        try:
            openai_client = AsyncOpenAI(api_key=config.openai_api_key)
        except Exception as exc:
            raise RuntimeError("Failed to initialize OpenAI Async client") from exc
        detector = ObjectDetector(openai_client, model=config.openai_model)
    else:
        logger.warning("OPENAI_API_KEY is not set; object detection is disabled")
    app.state.openai_client = openai_client

    app.state.image_service = DetectionStorageService(ImageDAL(db_initializer), storage, detector)

    try:
        yield
    finally:
        if http_client is not None:
            await http_client.aclose()
        if openai_client is not None:
            await openai_client.close()


async def handle_image_service_error(request: Request, exc: ImageServiceError) -> JSONResponse:
    """Render taxonomy errors with their fixed status code and body."""
    return JSONResponse(status_code=exc.status_code, content=exc.body())


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application instance.
    """
    app = FastAPI(title="Image Metadata Service", lifespan=lifespan)
    app.add_exception_handler(ImageServiceError, handle_image_service_error)

    @app.get("/health")
    async def health(request: Request):
        """
        Simple health check that reports store and detector availability.
        """
        has_db = hasattr(request.app.state, "db_initializer")
        service = getattr(request.app.state, "image_service", None)
        has_detector = getattr(service, "detector", None) is not None
        return {"ok": True, "db_initialized": has_db, "detector_available": has_detector}

    # Register application routers
    app.include_router(image_router)
    app.include_router(upload_router)

    return app


app = create_app()

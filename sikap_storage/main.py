import logging

from fastapi import APIRouter, Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from sikap_storage.auth import require_api_key
from sikap_storage.config import Settings, load_settings
from sikap_storage.routes import files, health, upload

logger = logging.getLogger(__name__)

CORS_METHODS = ["GET", "POST", "DELETE"]
CORS_HEADERS = ["content-type", "accept", "x-api-key"]


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    settings.upload_dir.mkdir(parents=True, exist_ok=True)

    app = FastAPI(title="sikap-storage", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=CORS_METHODS,
        allow_headers=CORS_HEADERS,
    )

    protected = APIRouter(dependencies=[Depends(require_api_key)])
    protected.include_router(health.router)
    protected.include_router(upload.router)
    protected.include_router(files.router)
    app.include_router(protected)

    app.mount("/files", StaticFiles(directory=str(settings.upload_dir)), name="files")
    logger.debug("app created: upload_dir=%s", settings.upload_dir)
    return app

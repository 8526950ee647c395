import tempfile

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from sikap_storage.auth import get_settings
from sikap_storage.config import Settings

router = APIRouter()

BANNER = "Sikap Storage: file service is running"


@router.get("/", response_class=PlainTextResponse)
def banner():
    return BANNER


def _storage_state(settings: Settings) -> str:
    try:
        with tempfile.NamedTemporaryFile(dir=settings.upload_dir, prefix=".health-"):
            pass
    except OSError as e:
        return f"error: {e.strerror or e}"
    return "ok"


@router.get("/health")
def health(settings: Settings = Depends(get_settings)):
    """Report whether a file can be created in the upload directory."""
    storage = _storage_state(settings)
    return {
        "status": "ok" if storage == "ok" else "unhealthy",
        "checks": {"app": "ok", "storage": storage},
    }

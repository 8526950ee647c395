import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

DEFAULT_UPLOAD_DIR = "./uploads"
DEFAULT_PORT = 4000
DEFAULT_MAX_MB = 10
DEFAULT_WEBP_QUALITY = 80

_FALSY = {"0", "false", "no", "off"}
LOG_LEVELS = ("critical", "error", "warning", "info", "debug")


@dataclass(frozen=True, slots=True)
class Settings:
    """Runtime configuration, built once at startup and passed to every handler."""

    upload_dir: Path
    api_secret: str
    port: int = DEFAULT_PORT
    max_upload_bytes: int = DEFAULT_MAX_MB * 1024 * 1024
    transcode_images: bool = True
    webp_quality: int = DEFAULT_WEBP_QUALITY
    log_level: str = "info"

    @property
    def max_upload_mb(self) -> int:
        return self.max_upload_bytes // (1024 * 1024)


def _int_env(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = (environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be a number, got {raw!r}") from None


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    environ = os.environ if environ is None else environ

    api_secret = environ.get("API_SECRET", "")
    if not api_secret:
        raise RuntimeError("API_SECRET is required")

    port = _int_env(environ, "PORT", DEFAULT_PORT)
    if not 0 < port <= 65535:
        raise RuntimeError(f"PORT out of range: {port}")

    max_mb = _int_env(environ, "UPLOAD_MAX_MB", DEFAULT_MAX_MB)
    if max_mb <= 0:
        raise RuntimeError("UPLOAD_MAX_MB must be positive")

    quality = _int_env(environ, "WEBP_QUALITY", DEFAULT_WEBP_QUALITY)
    if not 0 <= quality <= 100:
        raise RuntimeError("WEBP_QUALITY must be between 0 and 100")

    log_level = (environ.get("LOG_LEVEL") or "info").strip().lower()
    if log_level not in LOG_LEVELS:
        raise RuntimeError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")

    transcode = (environ.get("TRANSCODE_IMAGES") or "1").strip().lower() not in _FALSY
    upload_dir = Path(environ.get("UPLOAD_DIR") or DEFAULT_UPLOAD_DIR).resolve()

    return Settings(
        upload_dir=upload_dir,
        api_secret=api_secret,
        port=port,
        max_upload_bytes=max_mb * 1024 * 1024,
        transcode_images=transcode,
        webp_quality=quality,
        log_level=log_level,
    )

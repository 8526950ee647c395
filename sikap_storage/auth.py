import logging
import re
import secrets

from fastapi import Depends, Header, HTTPException
from starlette.requests import Request

from sikap_storage.config import Settings

logger = logging.getLogger(__name__)

_SEPARATORS_RE = re.compile(r"[/\\]")


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def sanitize_filename(raw: str) -> str | None:
    """Reduce a client supplied name to its last path segment.

    ``../../etc/passwd`` becomes ``passwd``; names with no usable final
    segment (``""``, ``"/"``, ``".."``, ``"a/.."``) give ``None``.
    """
    segments = [s for s in _SEPARATORS_RE.split(raw or "") if s and s != "."]
    if not segments:
        return None
    name = segments[-1]
    if name == ".." or "\x00" in name:
        return None
    return name


def authorize(header_value: str | None, settings: Settings) -> bool:
    if header_value is None:
        return False
    return secrets.compare_digest(header_value.encode(), settings.api_secret.encode())


def require_api_key(
    request: Request,
    x_api_key: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
):
    if not authorize(x_api_key, settings):
        logger.warning("rejected request: %s %s", request.method, request.url.path)
        raise HTTPException(status_code=401, detail="invalid key")

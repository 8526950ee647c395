import logging

from fastapi import APIRouter, Depends, HTTPException
from starlette.concurrency import run_in_threadpool
from starlette.requests import Request

from sikap_storage.auth import get_settings
from sikap_storage.config import Settings
from sikap_storage.formdata import read_parts
from sikap_storage.models import UploadedFile, UploadResponse
from sikap_storage.storage import Transcoded, generate_stored_name, transcode, write_file

router = APIRouter(tags=["upload"])
logger = logging.getLogger(__name__)

FILE_FIELD = "file"
DEFAULT_NAME = "unknown"
DEFAULT_CONTENT_TYPE = "application/octet-stream"


def _check_content_length(request: Request, settings: Settings):
    raw = request.headers.get("content-length")
    if not raw:
        return
    try:
        size = int(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail="invalid content-length") from None
    if size > settings.max_upload_bytes:
        logger.warning("upload rejected: content-length %s over limit", size)
        raise HTTPException(
            status_code=413, detail=f"file too large (max {settings.max_upload_mb}MB)"
        )


@router.post("/upload", response_model=UploadResponse)
async def upload_files(request: Request, settings: Settings = Depends(get_settings)):
    _check_content_length(request, settings)
    parts = await read_parts(
        request.stream(),
        request.headers.get("content-type", ""),
        wanted={FILE_FIELD},
        max_bytes=settings.max_upload_bytes,
    )

    uploaded: list[UploadedFile] = []
    for part in parts:
        original_name = part.filename or DEFAULT_NAME
        mimetype = part.content_type or DEFAULT_CONTENT_TYPE
        data = bytes(part.data)

        if settings.transcode_images:
            result = await run_in_threadpool(transcode, data, mimetype, settings.webp_quality)
        else:
            result = Transcoded(data)
        mimetype = result.mimetype or mimetype
        stored_name, _ = generate_stored_name(original_name, result.extension)
        try:
            await run_in_threadpool(write_file, settings.upload_dir / stored_name, result.data)
        except OSError as e:
            logger.error("failed to write %s: %s", stored_name, e)
            raise HTTPException(status_code=500, detail="failed to store file") from e

        uploaded.append(
            UploadedFile(
                original_name=original_name,
                filename=stored_name,
                url=f"/files/{stored_name}",
                mimetype=mimetype,
            )
        )

    if uploaded:
        logger.info(
            "upload success: count=%s files=%s",
            len(uploaded),
            ",".join(f.filename for f in uploaded),
        )
    return UploadResponse(status="success", data=uploaded)

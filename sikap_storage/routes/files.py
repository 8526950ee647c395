"""Delete stored files.

Routes:
  DELETE /file/{filename}  — remove one stored file from the upload directory

Reads go through the unauthenticated ``/files`` static mount instead.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from sikap_storage.auth import get_settings
from sikap_storage.config import Settings
from sikap_storage.models import DeleteResponse
from sikap_storage.storage import DeleteStatus, delete_stored_file

router = APIRouter(tags=["files"])

_HTTP_STATUS = {
    DeleteStatus.SUCCESS: 200,
    DeleteStatus.NOT_FOUND_OR_ERROR: 404,
    DeleteStatus.INVALID_NAME: 400,
}


@router.delete("/file/{filename}", response_model=DeleteResponse)
async def delete_file(filename: str, settings: Settings = Depends(get_settings)):
    result = await run_in_threadpool(delete_stored_file, filename, settings)
    return JSONResponse(result.to_dict(), status_code=_HTTP_STATUS[result.status])

from typing import List, Optional
from pydantic import BaseModel


class UploadedFile(BaseModel):
    original_name: str
    filename: str
    url: str
    mimetype: str


class UploadResponse(BaseModel):
    status: str
    data: List[UploadedFile]


class DeleteResponse(BaseModel):
    status: str
    message: str
    filename: Optional[str] = None

import enum
import io
import logging
import os
import re
import uuid
from dataclasses import dataclass
from pathlib import Path

from PIL import Image

from sikap_storage.auth import sanitize_filename
from sikap_storage.config import Settings

logger = logging.getLogger(__name__)

FALLBACK_EXTENSION = "bin"
WEBP_EXTENSION = "webp"
WEBP_MIME = "image/webp"
EXTENSION_RE = re.compile(r"[A-Za-z0-9]{1,16}")

# Errors Pillow raises for undecodable or unencodable input.
_TRANSCODE_ERRORS = (
    OSError,
    ValueError,
    SyntaxError,
    KeyError,
    EOFError,
    Image.DecompressionBombError,
)


@dataclass(frozen=True, slots=True)
class Transcoded:
    data: bytes
    extension: str | None = None
    mimetype: str | None = None


def is_image_type(content_type: str) -> bool:
    return (content_type or "").strip().lower().startswith("image/")


def _encode_webp(data: bytes, quality: int) -> Transcoded:
    with Image.open(io.BytesIO(data)) as img:
        if img.format == "WEBP":
            img.load()
            return Transcoded(data, WEBP_EXTENSION, WEBP_MIME)
        animated = getattr(img, "is_animated", False)
        if animated:
            frame = img
        elif img.mode in ("RGB", "RGBA"):
            frame = img
        elif img.mode in ("LA", "PA") or "transparency" in img.info:
            frame = img.convert("RGBA")
        else:
            frame = img.convert("RGB")
        out = io.BytesIO()
        frame.save(out, format="WEBP", quality=quality, save_all=animated)
    return Transcoded(out.getvalue(), WEBP_EXTENSION, WEBP_MIME)


def transcode(data: bytes, content_type: str, quality: int = 80) -> Transcoded:
    """Re-encode image bytes as WebP.

    Never raises: anything that is not an image, or that Pillow cannot
    decode or encode, comes back unchanged with no extension.
    """
    if not is_image_type(content_type):
        return Transcoded(data)
    try:
        return _encode_webp(data, quality)
    except _TRANSCODE_ERRORS as e:
        logger.debug("transcode skipped for %s payload: %s", content_type, e)
        return Transcoded(data)


def extension_of(original_name: str) -> str:
    base = sanitize_filename(original_name) or ""
    stem, dot, ext = base.rpartition(".")
    if not dot or not stem or not EXTENSION_RE.fullmatch(ext):
        return FALLBACK_EXTENSION
    return ext


def generate_stored_name(original_name: str, extension: str | None = None) -> tuple[str, str]:
    ext = extension or extension_of(original_name)
    return f"{uuid.uuid4()}.{ext}", ext


def write_file(path: Path, data: bytes) -> None:
    with path.open("xb") as out:
        out.write(data)
        out.flush()
        os.fsync(out.fileno())


class DeleteStatus(str, enum.Enum):
    SUCCESS = "success"
    NOT_FOUND_OR_ERROR = "not_found_or_error"
    INVALID_NAME = "invalid_name"


@dataclass(frozen=True, slots=True)
class DeleteResult:
    status: DeleteStatus
    message: str
    filename: str | None = None

    def to_dict(self) -> dict:
        body = {
            "status": "success" if self.status is DeleteStatus.SUCCESS else "error",
            "message": self.message,
        }
        if self.filename is not None:
            body["filename"] = self.filename
        return body


def delete_stored_file(raw_filename: str, settings: Settings) -> DeleteResult:
    name = sanitize_filename(raw_filename)
    if name is None:
        return DeleteResult(DeleteStatus.INVALID_NAME, "Invalid filename format")
    target = settings.upload_dir / name
    try:
        target.unlink()
    except OSError as e:
        logger.warning("delete failed for %s: %s", name, e.strerror or e)
        return DeleteResult(
            DeleteStatus.NOT_FOUND_OR_ERROR, "File not found or could not be deleted"
        )
    logger.info("deleted %s", name)
    return DeleteResult(DeleteStatus.SUCCESS, "File deleted", raw_filename)

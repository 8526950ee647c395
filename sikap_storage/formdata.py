"""Raw multipart/form-data reader.

Parts keep the exact bytes the client sent; nothing is decoded as text.
The whole body is parsed before any part is returned, so malformed framing
is reported before a single file is written.
"""
import logging
from dataclasses import dataclass, field
from typing import AsyncIterator

from fastapi import HTTPException
from python_multipart.exceptions import FormParserError
from python_multipart.multipart import MultipartParser, parse_options_header

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Part:
    name: str | None = None
    filename: str | None = None
    content_type: str | None = None
    data: bytearray = field(default_factory=bytearray)


def _text(value: bytes | None) -> str | None:
    if value is None:
        return None
    return value.decode("utf-8", errors="replace")


class _Collector:
    """python-multipart callbacks that keep parts named in ``wanted``."""

    def __init__(self, wanted: set[str]):
        self.wanted = wanted
        self.parts: list[Part] = []
        self.finished = False
        self._part: Part | None = None
        self._keep = False
        self._headers: dict[bytes, bytes] = {}
        self._field = b""
        self._value = b""

    def callbacks(self) -> dict:
        return {
            "on_part_begin": self.on_part_begin,
            "on_part_data": self.on_part_data,
            "on_part_end": self.on_part_end,
            "on_header_field": self.on_header_field,
            "on_header_value": self.on_header_value,
            "on_header_end": self.on_header_end,
            "on_headers_finished": self.on_headers_finished,
            "on_end": self.on_end,
        }

    def on_part_begin(self):
        self._part = Part()
        self._keep = False
        self._headers = {}

    def on_header_field(self, data: bytes, start: int, end: int):
        self._field += data[start:end]

    def on_header_value(self, data: bytes, start: int, end: int):
        self._value += data[start:end]

    def on_header_end(self):
        self._headers[self._field.strip().lower()] = self._value.strip()
        self._field = b""
        self._value = b""

    def on_headers_finished(self):
        _, options = parse_options_header(self._headers.get(b"content-disposition"))
        part = self._part
        part.name = _text(options.get(b"name"))
        part.filename = _text(options.get(b"filename"))
        part.content_type = _text(self._headers.get(b"content-type")) or None
        self._keep = part.name in self.wanted

    def on_part_data(self, data: bytes, start: int, end: int):
        if self._keep:
            self._part.data += data[start:end]

    def on_part_end(self):
        if self._keep:
            self.parts.append(self._part)
        self._part = None

    def on_end(self):
        self.finished = True


def boundary_of(content_type: str) -> bytes:
    media_type, params = parse_options_header(content_type)
    if media_type != b"multipart/form-data":
        raise HTTPException(status_code=400, detail="expected multipart/form-data body")
    boundary = params.get(b"boundary")
    if not boundary:
        raise HTTPException(status_code=400, detail="malformed multipart body")
    return boundary


async def read_parts(
    stream: AsyncIterator[bytes],
    content_type: str,
    wanted: set[str],
    max_bytes: int,
) -> list[Part]:
    """Parse a multipart body, returning the parts whose field name is in ``wanted``.

    Every byte pulled from ``stream`` counts against ``max_bytes``, whatever
    part it belongs to.
    """
    collector = _Collector(wanted)
    parser = MultipartParser(boundary_of(content_type), collector.callbacks())
    total = 0
    try:
        async for chunk in stream:
            total += len(chunk)
            if total > max_bytes:
                logger.warning("upload rejected: body over %s bytes", max_bytes)
                raise HTTPException(
                    status_code=413,
                    detail=f"file too large (max {max_bytes // (1024 * 1024)}MB)",
                )
            parser.write(chunk)
        parser.finalize()
    except FormParserError as e:
        logger.warning("malformed multipart body: %s", e)
        raise HTTPException(status_code=400, detail="malformed multipart body") from e

    if not collector.finished:
        logger.warning("malformed multipart body: closing boundary missing")
        raise HTTPException(status_code=400, detail="malformed multipart body")
    return collector.parts

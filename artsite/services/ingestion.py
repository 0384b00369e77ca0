"""
Turns uploaded files and pasted URL text into gallery/shop items.

File batches are read concurrently and committed only once every read has
finished; one bad file fails the whole batch and nothing is appended. The
commit goes through the editor, so it lands on whatever the collection holds
at that moment (a reset issued while reads were in flight is superseded).
"""

from __future__ import annotations

import asyncio
import base64
import io
import logging
import mimetypes
import re
from typing import Iterable, Protocol

from PIL import Image, ImageOps

from artsite.core.config import get_settings
from artsite.domain.items import NewItem

log = logging.getLogger(__name__)

_URL_SPLIT_RE = re.compile(r"[\n,\s]")
FALLBACK_MIME = "application/octet-stream"


class UploadedFile(Protocol):
    filename: str | None
    content_type: str | None

    async def read(self) -> bytes: ...


class IngestionError(Exception):
    """Base exception for ingestion failures."""


class FileReadError(IngestionError):
    """A file in the batch could not be read; the batch is discarded."""

    def __init__(self, filename: str, reason: str) -> None:
        super().__init__(f"{filename or '<unnamed>'}: {reason}")
        self.filename = filename
        self.reason = reason


class EmptyUploadError(FileReadError):
    pass


class UploadTooLargeError(FileReadError):
    pass


def parse_url_text(text: str | None) -> list[str]:
    """Split on newlines, commas or whitespace and drop empty tokens."""
    return [token.strip() for token in _URL_SPLIT_RE.split(text or "") if token.strip()]


def ingest_urls(editor, text: str | None) -> int:
    urls = parse_url_text(text)
    if not urls:
        return 0
    editor.add([NewItem(src=url) for url in urls])
    editor.close_paste()
    return len(urls)


def guess_mime(content_type: str | None, filename: str | None) -> str:
    ct = (content_type or "").split(";", 1)[0].strip().lower()
    if ct and ct != FALLBACK_MIME:
        return ct
    guessed, _ = mimetypes.guess_type(filename or "")
    return guessed or ct or FALLBACK_MIME


def _downscale(data: bytes, max_px: int) -> tuple[bytes, str | None]:
    """Shrink images whose longest edge exceeds max_px; anything Pillow can't open is kept as-is."""
    if max_px <= 0:
        return data, None
    try:
        with Image.open(io.BytesIO(data)) as original:
            if max(original.size) <= max_px:
                return data, None
            image = ImageOps.exif_transpose(original)
            fmt = "PNG" if image.mode in ("RGBA", "LA", "P") else "JPEG"
            if fmt == "JPEG":
                image = image.convert("RGB")
            image.thumbnail((max_px, max_px), Image.LANCZOS)
            buffer = io.BytesIO()
            if fmt == "JPEG":
                image.save(buffer, format=fmt, quality=85, optimize=True)
            else:
                image.save(buffer, format=fmt, optimize=True)
            return buffer.getvalue(), f"image/{fmt.lower()}"
    except (OSError, ValueError, Image.DecompressionBombError):
        return data, None


def to_data_uri(data: bytes, content_type: str | None = None, filename: str | None = None, max_px: int = 0) -> str:
    payload, resized_mime = _downscale(data, max_px)
    mime = resized_mime or guess_mime(content_type, filename)
    return f"data:{mime};base64,{base64.b64encode(payload).decode('ascii')}"


async def read_file(upload: UploadedFile, *, max_bytes: int = 0, max_px: int = 0) -> str:
    name = upload.filename or ""
    try:
        data = await upload.read()
    except Exception as exc:
        raise FileReadError(name, str(exc) or exc.__class__.__name__) from exc
    if not data:
        raise EmptyUploadError(name, "empty file")
    if max_bytes and len(data) > max_bytes:
        raise UploadTooLargeError(name, f"larger than {max_bytes} bytes")
    return await asyncio.to_thread(to_data_uri, data, upload.content_type, name, max_px)


def selected(files: Iterable[UploadedFile | None] | None) -> list[UploadedFile]:
    """Drop the blank parts browsers send when the file input is left empty."""
    return [f for f in (files or []) if f is not None and (f.filename or "")]


async def read_files(files: Iterable[UploadedFile], *, max_bytes: int = 0, max_px: int = 0) -> list[str]:
    """
    Read every file concurrently; results keep selection order, any failure fails all.

    On the first failure the reads still in flight are cancelled and awaited
    before the error propagates, so none of them outlives the request.
    """
    tasks = [asyncio.ensure_future(read_file(f, max_bytes=max_bytes, max_px=max_px)) for f in files]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def read_uploads(files: Iterable[UploadedFile | None] | None, settings=None) -> list[str]:
    """Data URIs for the selected files, or [] when nothing was selected."""
    batch = selected(files)
    if not batch:
        return []
    settings = settings or get_settings()
    try:
        return await read_files(batch, max_bytes=settings.max_upload_bytes, max_px=settings.embed_max_px)
    except FileReadError as exc:
        log.warning("discarding %d-file batch: %s", len(batch), exc)
        raise


def add_data_uris(editor, uris: list[str]) -> int:
    """Append one item per URI to whatever the editor holds now, then close the paste panel."""
    if not uris:
        return 0
    editor.add([NewItem(src=uri) for uri in uris])
    editor.close_paste()
    return len(uris)


async def ingest_files(editor, files: Iterable[UploadedFile | None] | None, settings=None) -> int:
    return add_data_uris(editor, await read_uploads(files, settings))


async def read_about_image(files: Iterable[UploadedFile | None] | None, settings=None) -> str | None:
    """Only the first selected file is used."""
    batch = selected(files)
    if not batch:
        return None
    settings = settings or get_settings()
    return await read_file(batch[0], max_bytes=settings.max_upload_bytes, max_px=settings.embed_max_px)


async def ingest_about_image(about, files: Iterable[UploadedFile | None] | None, settings=None) -> bool:
    uri = await read_about_image(files, settings)
    if uri is None:
        return False
    about.set_image(uri)
    return True

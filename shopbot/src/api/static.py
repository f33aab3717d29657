"""
Shopbot - Image Serving
========================
``GET /images/{name}`` serves pictures referenced from the knowledge
file (``![Pad Thai](padthai.jpg)``).

Content type resolution:
    1. File extension (``mimetypes``)
    2. Magic bytes for JPEG / PNG / GIF / WEBP (extension-less uploads)
    3. ``application/octet-stream``

Names that resolve outside ``IMAGES_DIR`` are answered with 404, the
same as a missing file.
"""

from __future__ import annotations

import mimetypes
from pathlib import Path

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse

from shopbot.src.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()

_OCTET_STREAM = "application/octet-stream"

# (prefix, offset, mime) — WEBP is "RIFF....WEBP"
_MAGIC_SIGNATURES: tuple[tuple[bytes, int, str], ...] = (
    (b"\xff\xd8\xff", 0, "image/jpeg"),
    (b"\x89PNG\r\n\x1a\n", 0, "image/png"),
    (b"GIF87a", 0, "image/gif"),
    (b"GIF89a", 0, "image/gif"),
    (b"WEBP", 8, "image/webp"),
)


def sniff_content_type(head: bytes) -> str | None:
    """Match the first bytes of a file against known image signatures."""
    for signature, offset, mime in _MAGIC_SIGNATURES:
        if head[offset : offset + len(signature)] == signature:
            if mime == "image/webp" and not head.startswith(b"RIFF"):
                continue
            return mime
    return None


def resolve_content_type(path: Path) -> str:
    guessed, _ = mimetypes.guess_type(path.name)
    if guessed:
        return guessed
    with path.open("rb") as fh:
        sniffed = sniff_content_type(fh.read(16))
    return sniffed or _OCTET_STREAM


def resolve_image_path(images_dir: Path, name: str) -> Path | None:
    """Absolute path of *name* inside *images_dir*, or ``None`` if it escapes or is missing."""
    root = images_dir.resolve()
    candidate = (root / name).resolve()
    if not candidate.is_relative_to(root) or not candidate.is_file():
        return None
    return candidate


@router.get("/images/{name:path}")
async def serve_image(name: str, request: Request) -> FileResponse:
    """Serve one image file from the configured images directory."""
    images_dir: Path = request.app.state.settings.IMAGES_DIR
    path = resolve_image_path(images_dir, name)
    if path is None:
        logger.debug("[API] Image not found: %s", name)
        raise HTTPException(status_code=404, detail="Not found")
    return FileResponse(path, media_type=resolve_content_type(path))

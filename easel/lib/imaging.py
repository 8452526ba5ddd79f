"""Image inspection helpers using Pillow."""

from __future__ import annotations

import io

from PIL import Image, UnidentifiedImageError


def detect_image_content_type(data: bytes) -> str | None:
    """Detect image content type from magic bytes.

    Returns ``None`` if the data does not match a known raster signature.
    """
    if data[:3] == b"\xff\xd8\xff":
        return "image/jpeg"
    if data[:8] == b"\x89PNG\r\n\x1a\n":
        return "image/png"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp"
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return "image/gif"
    return None


def probe_image(data: bytes) -> tuple[int, int, str] | None:
    """Return ``(width, height, format)`` for a raster image, or ``None``.

    Only the header is parsed; pixel data is never decoded.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            width, height = img.size
            fmt = (img.format or "").lower()
    except (UnidentifiedImageError, OSError, ValueError):
        return None
    if fmt == "jpeg":
        fmt = "jpg"
    return width, height, fmt

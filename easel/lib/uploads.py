"""Validated upload payloads handed to the media gateway."""

from __future__ import annotations

from dataclasses import dataclass

from easel.config import ALLOWED_IMAGE_TYPES
from easel.lib.imaging import detect_image_content_type


class UploadValidationError(Exception):
    """Raised when an upload is missing, too large or not an allowed image type."""


@dataclass
class UploadedFile:
    """Raw bytes of one uploaded file plus the client-declared metadata."""

    data: bytes
    content_type: str
    filename: str

    @property
    def size(self) -> int:
        return len(self.data)


def validate_upload(
    file: UploadedFile | None,
    max_size: int = 4 * 1024 * 1024,
    allowed_types: list[str] | None = None,
) -> UploadedFile:
    """Check size and type of an upload, returning it unchanged when valid."""
    if file is None or not file.data:
        raise UploadValidationError("No file uploaded")

    if file.size > max_size:
        raise UploadValidationError(
            f"File too large. Maximum size is {max_size // (1024 * 1024)}MB."
        )

    allowed = allowed_types if allowed_types is not None else ALLOWED_IMAGE_TYPES
    if file.content_type not in allowed:
        raise UploadValidationError("Only image files are allowed.")

    # Raster types must carry a matching signature; SVG is text and has none
    sniffed = detect_image_content_type(file.data)
    if file.content_type != "image/svg+xml" and sniffed is None:
        raise UploadValidationError(
            f"File content does not look like {file.content_type}"
        )

    return file

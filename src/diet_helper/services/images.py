"""Food image handling."""

import base64
import binascii
import logging
from dataclasses import dataclass
from typing import Protocol

from diet_helper.domain.errors import ImageIOError, ValidationError
from diet_helper.domain.validation import (
    DEFAULT_IMAGE_FORMATS,
    DEFAULT_MAX_IMAGE_BYTES,
    image_errors,
    image_extension,
)

_logger = logging.getLogger(__name__)

MIME_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
}


class ImageStore(Protocol):
    """Storage interface for image files."""

    async def save(self, content: bytes, extension: str) -> str:
        """Store image bytes and return the path to reference them by."""

    async def delete(self, path: str) -> None:
        """Delete a stored image. A missing file counts as deleted."""


@dataclass(frozen=True)
class ImageUpload:
    """An image file submitted by the user."""

    filename: str
    content: bytes


def is_inline_image(image_url: str) -> bool:
    """Return True for images embedded in the document as data URLs."""
    return image_url.startswith("data:")


def to_data_url(image_bytes: bytes, mime_type: str) -> str:
    """Convert bytes to a base64 data URL."""
    encoded = base64.b64encode(image_bytes).decode("utf-8")
    return f"data:{mime_type};base64,{encoded}"


def from_data_url(data_url: str) -> tuple[str, bytes]:
    """Split a base64 data URL into its MIME type and bytes."""
    header, separator, payload = data_url.partition(",")
    if not separator or not header.startswith("data:") or ";base64" not in header:
        raise ValidationError(["Image must be a base64 data URL"])
    mime_type = header[len("data:") :].split(";", 1)[0]
    try:
        content = base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise ValidationError(["Image data is not valid base64"]) from exc
    return mime_type, content


@dataclass
class ImageService:
    """Validates uploads and cleans up images that are no longer referenced.

    Storage failures never fail the catalog operation around them: a failed
    save yields an empty image path and a failed delete is only logged.
    """

    store: ImageStore
    formats: frozenset[str] = DEFAULT_IMAGE_FORMATS
    max_bytes: int = DEFAULT_MAX_IMAGE_BYTES

    async def save_upload(self, upload: ImageUpload) -> str:
        """Validate and store an upload; return its path or "" on failure."""
        errors = image_errors(
            upload.filename, len(upload.content), self.formats, self.max_bytes
        )
        if errors:
            raise ValidationError(errors)
        try:
            return await self.store.save(
                upload.content, image_extension(upload.filename)
            )
        except ImageIOError:
            _logger.warning("Image save failed: filename=%s", upload.filename)
            return ""

    async def discard(self, image_url: str) -> bool:
        """Delete a stored image unless it is empty or inline."""
        if not image_url or is_inline_image(image_url):
            return False
        try:
            await self.store.delete(image_url)
        except ImageIOError:
            _logger.warning("Image delete failed: path=%s", image_url)
            return False
        return True

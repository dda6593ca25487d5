"""Images embedded in the catalog document as data URLs."""

from dataclasses import dataclass

from diet_helper.services.images import MIME_TYPES, ImageStore, to_data_url


@dataclass
class InlineImageStore(ImageStore):
    """Returns data URLs instead of writing files, for remote-only storage."""

    async def save(self, content: bytes, extension: str) -> str:
        """Encode image bytes as a data URL."""
        mime_type = MIME_TYPES.get(extension.lower(), "application/octet-stream")
        return to_data_url(content, mime_type)

    async def delete(self, path: str) -> None:
        """Nothing to delete: the image lives inside the document."""
        return None

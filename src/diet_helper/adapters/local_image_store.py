"""Image files stored next to the catalog document."""

import asyncio
from dataclasses import dataclass
from pathlib import Path

from diet_helper.domain.errors import ImageIOError
from diet_helper.services.ids import IdGenerator
from diet_helper.services.images import ImageStore


@dataclass
class LocalImageStore(ImageStore):
    """Writes images into a directory under the data root.

    Paths handed out are relative to the data root, e.g. ``images/food_1.png``.
    """

    root: Path
    images_dir: str
    names: IdGenerator

    @classmethod
    def create(cls, root: Path, images_dir: str = "images") -> "LocalImageStore":
        """Create an image store with its own file name generator."""
        return cls(root=root, images_dir=images_dir, names=IdGenerator())

    async def save(self, content: bytes, extension: str) -> str:
        """Write image bytes and return the relative path."""
        relative = f"{self.images_dir}/food_{self.names.next_id()}.{extension}"
        target = self.root / relative
        try:
            await asyncio.to_thread(_write_bytes, target, content)
        except OSError as exc:
            raise ImageIOError(f"Failed to write image {relative}") from exc
        return relative

    async def delete(self, path: str) -> None:
        """Delete an image file; a missing file is not an error."""
        target = self._resolve(path)
        try:
            await asyncio.to_thread(target.unlink, missing_ok=True)
        except OSError as exc:
            raise ImageIOError(f"Failed to delete image {path}") from exc

    def _resolve(self, path: str) -> Path:
        images_root = (self.root / self.images_dir).resolve()
        target = (self.root / path).resolve()
        if not target.is_relative_to(images_root):
            raise ImageIOError(f"Image path outside the images directory: {path}")
        return target


def _write_bytes(target: Path, content: bytes) -> None:
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(content)

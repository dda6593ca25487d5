"""JSON file storage for the catalog document."""

import asyncio
import json
import logging
import shutil
from dataclasses import dataclass
from pathlib import Path

from diet_helper.services.ids import IdGenerator
from diet_helper.services.persistence import CatalogRepository

_logger = logging.getLogger(__name__)


@dataclass
class JsonFileCatalogRepository(CatalogRepository):
    """Keeps the catalog in a single pretty-printed JSON file."""

    data_path: Path
    backups_dir: Path
    names: IdGenerator

    @classmethod
    def create(cls, data_path: Path, backups_dir: Path) -> "JsonFileCatalogRepository":
        """Create a repository with its own backup name generator."""
        return cls(data_path=data_path, backups_dir=backups_dir, names=IdGenerator())

    async def load(self) -> dict[str, object] | None:
        """Return the stored document, or None when the file does not exist."""
        return await asyncio.to_thread(self._read)

    async def save(self, document: dict[str, object]) -> None:
        """Replace the stored document."""
        await asyncio.to_thread(self._write, self.data_path, document)

    async def create_backup(self, document: dict[str, object]) -> str:
        """Write a backup file and return its path."""
        path = self.backups_dir / f"backup_{self.names.next_id()}.json"
        await asyncio.to_thread(self._write, path, document)
        return str(path)

    async def set_aside(self, document: object) -> str | None:
        """Copy the data file aside after its contents failed to load."""
        return await asyncio.to_thread(self._set_aside_corrupt_file)

    def _read(self) -> dict[str, object] | None:
        if not self.data_path.exists():
            return None
        try:
            return json.loads(self.data_path.read_text(encoding="utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            self._set_aside_corrupt_file()
            raise

    def _set_aside_corrupt_file(self) -> str | None:
        if not self.data_path.exists():
            return None
        self.backups_dir.mkdir(parents=True, exist_ok=True)
        target = self.backups_dir / f"corrupt_{self.names.next_id()}.json"
        shutil.copy2(self.data_path, target)
        _logger.warning("Unreadable catalog file copied to %s", target)
        return str(target)

    @staticmethod
    def _write(path: Path, document: dict[str, object]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        temporary = path.with_name(f"{path.name}.tmp")
        temporary.write_text(
            json.dumps(document, indent=2, ensure_ascii=False), encoding="utf-8"
        )
        temporary.replace(path)

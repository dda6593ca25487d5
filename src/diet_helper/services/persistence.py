"""Catalog persistence: repository contract and a serialized save queue."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from diet_helper.domain.errors import PersistenceError
from diet_helper.domain.models import Catalog
from diet_helper.services.documents import catalog_from_document, catalog_to_document
from diet_helper.services.notices import SAVE_FAILED, NoticeBoard
from diet_helper.services.store import CatalogStore

_logger = logging.getLogger(__name__)


class CatalogRepository(Protocol):
    """Storage interface for the whole catalog document."""

    async def load(self) -> dict[str, object] | None:
        """Return the stored document, or None when nothing was saved yet."""

    async def save(self, document: dict[str, object]) -> None:
        """Replace the stored document."""

    async def create_backup(self, document: dict[str, object]) -> str:
        """Store a backup copy and return where it was written."""

    async def set_aside(self, document: object) -> str | None:
        """Keep a copy of a stored document that could not be loaded."""


@dataclass
class CatalogPersistence:
    """Loads the catalog and writes snapshots one at a time, in call order.

    A snapshot is taken when ``save`` is called. If a newer snapshot is queued
    by the time an older one gets its turn, the older one is skipped, so the
    last mutation always wins.
    """

    repository: CatalogRepository
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, init=False, repr=False)
    _tickets: int = field(default=0, init=False, repr=False)

    async def load(self) -> Catalog:
        """Load and validate the stored catalog.

        A document with the wrong shape is set aside before the error
        propagates, so a later save cannot destroy the only copy.
        """
        try:
            raw = await self.repository.load()
        except Exception as exc:
            raise PersistenceError("Failed to load catalog") from exc
        try:
            return catalog_from_document(raw)
        except PersistenceError:
            await self._set_aside(raw)
            raise

    async def save(self, store: CatalogStore) -> bool:
        """Write the store's current tree; return False if superseded."""
        document = catalog_to_document(store.catalog)
        revision = store.revision
        self._tickets += 1
        ticket = self._tickets
        async with self._lock:
            if ticket < self._tickets:
                return False
            try:
                await self.repository.save(document)
            except Exception as exc:
                raise PersistenceError("Failed to save catalog") from exc
        store.mark_saved(revision)
        return True

    async def save_and_report(
        self, store: CatalogStore, notices: NoticeBoard
    ) -> bool:
        """Save, turning a failure into a user notice instead of an exception.

        Returns False only when the write failed. A superseded snapshot counts
        as saved: the newer snapshot queued after it carries its changes.
        """
        try:
            await self.save(store)
        except PersistenceError:
            _logger.exception("Failed to save catalog: revision=%s", store.revision)
            notices.error(SAVE_FAILED)
            return False
        return True

    async def create_backup(self, store: CatalogStore) -> str:
        """Write a timestamped copy of the current tree."""
        document = catalog_to_document(store.catalog)
        document["backupDate"] = datetime.now(tz=UTC).isoformat()
        try:
            return await self.repository.create_backup(document)
        except Exception as exc:
            raise PersistenceError("Failed to create backup") from exc

    async def _set_aside(self, raw: object) -> None:
        try:
            location = await self.repository.set_aside(raw)
        except Exception:
            _logger.exception("Failed to set aside unreadable catalog")
            return
        _logger.warning("Unreadable catalog kept at %s", location)

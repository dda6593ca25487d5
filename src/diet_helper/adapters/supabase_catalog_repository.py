"""Supabase storage for the catalog document."""

import asyncio
import json
from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from diet_helper.services.ids import IdGenerator
from diet_helper.services.persistence import CatalogRepository


@dataclass
class SupabaseCatalogRepository(CatalogRepository):
    """Keeps the catalog as one JSON row per storage key."""

    client: Client
    table: str
    storage_key: str
    backup_prefix: str
    names: IdGenerator

    @classmethod
    def create(
        cls,
        client: Client,
        table: str = "catalog_documents",
        storage_key: str = "dietHelperData",
        backup_prefix: str = "dietHelperBackup_",
    ) -> "SupabaseCatalogRepository":
        """Create a repository with its own backup key generator."""
        return cls(
            client=client,
            table=table,
            storage_key=storage_key,
            backup_prefix=backup_prefix,
            names=IdGenerator(),
        )

    async def load(self) -> dict[str, object] | None:
        """Return the stored document, if a row exists."""
        return await asyncio.to_thread(self._load)

    async def save(self, document: dict[str, object]) -> None:
        """Upsert the document under the storage key."""
        await asyncio.to_thread(self._upsert, self.storage_key, document)

    async def create_backup(self, document: dict[str, object]) -> str:
        """Store a backup row and return its key."""
        key = f"{self.backup_prefix}{self.names.next_id()}"
        await asyncio.to_thread(self._upsert, key, document)
        return key

    async def set_aside(self, document: object) -> str | None:
        """Copy an unreadable document to a corrupt-data key."""
        key = f"{self.backup_prefix}corrupt_{self.names.next_id()}"
        await asyncio.to_thread(self._upsert, key, document)
        return key

    def _load(self) -> dict[str, object] | None:
        response = (
            self.client.table(self.table)
            .select("document")
            .eq("key", self.storage_key)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        document = response.data[0].get("document")
        if isinstance(document, str):
            return json.loads(document)
        return document

    def _upsert(self, key: str, document: dict[str, object]) -> None:
        response = (
            self.client.table(self.table)
            .upsert(
                {
                    "key": key,
                    "document": document,
                    "updated_at": datetime.now(tz=UTC).isoformat(),
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to store catalog document {key}")

"""Tests for the Supabase catalog repository."""

import asyncio
from dataclasses import dataclass, field

import pytest

from diet_helper.adapters.supabase_catalog_repository import (
    SupabaseCatalogRepository,
)


@dataclass
class FakeResponse:
    data: list[dict[str, object]] | None


@dataclass
class FakeTable:
    name: str
    response_queue: dict[str, list[list[dict[str, object]]]] = field(
        default_factory=lambda: {"select": [], "upsert": []}
    )
    payloads: list[object] = field(default_factory=list)
    last_filters: list[tuple[str, object]] = field(default_factory=list)

    def queue(self, action: str, data: list[dict[str, object]]) -> None:
        self.response_queue[action].append(data)

    def select(self, *_args) -> "FakeTable":
        self._action = "select"
        return self

    def upsert(self, payload) -> "FakeTable":  # type: ignore[no-untyped-def]
        self._action = "upsert"
        self.payloads.append(payload)
        return self

    def eq(self, column: str, value) -> "FakeTable":  # type: ignore[no-untyped-def]
        self.last_filters.append((column, value))
        return self

    def limit(self, _count: int) -> "FakeTable":
        return self

    def execute(self) -> FakeResponse:
        action = getattr(self, "_action", "select")
        queue = self.response_queue.get(action, [])
        data = queue.pop(0) if queue else []
        return FakeResponse(data=data)


@dataclass
class FakeSupabaseClient:
    tables: dict[str, FakeTable] = field(default_factory=dict)

    def table(self, name: str) -> FakeTable:
        if name not in self.tables:
            self.tables[name] = FakeTable(name=name)
        return self.tables[name]


def test_load_returns_none_without_row() -> None:
    client = FakeSupabaseClient()
    repository = SupabaseCatalogRepository.create(client)

    assert asyncio.run(repository.load()) is None
    assert client.table("catalog_documents").last_filters == [
        ("key", "dietHelperData")
    ]


def test_load_accepts_json_text() -> None:
    client = FakeSupabaseClient()
    client.table("catalog_documents").queue(
        "select", [{"document": '{"foods": [], "tags": []}'}]
    )
    repository = SupabaseCatalogRepository.create(client)

    assert asyncio.run(repository.load()) == {"foods": [], "tags": []}


def test_save_upserts_under_storage_key() -> None:
    client = FakeSupabaseClient()
    table = client.table("catalogs")
    table.queue("upsert", [{"key": "main"}])
    repository = SupabaseCatalogRepository.create(
        client, table="catalogs", storage_key="main"
    )

    asyncio.run(repository.save({"foods": []}))

    payload = table.payloads[0]
    assert payload["key"] == "main"
    assert payload["document"] == {"foods": []}
    assert "updated_at" in payload


def test_save_without_returned_row_raises() -> None:
    repository = SupabaseCatalogRepository.create(FakeSupabaseClient())

    with pytest.raises(RuntimeError):
        asyncio.run(repository.save({"foods": []}))


def test_backup_uses_prefixed_key() -> None:
    client = FakeSupabaseClient()
    table = client.table("catalog_documents")
    table.queue("upsert", [{"key": "backup"}])
    repository = SupabaseCatalogRepository.create(client)

    key = asyncio.run(repository.create_backup({"backupDate": "now"}))

    assert key.startswith("dietHelperBackup_")
    assert table.payloads[0]["key"] == key


def test_set_aside_copies_document_to_corrupt_key() -> None:
    client = FakeSupabaseClient()
    table = client.table("catalog_documents")
    table.queue("upsert", [{"key": "corrupt"}])
    repository = SupabaseCatalogRepository.create(client)

    key = asyncio.run(repository.set_aside({"foods": "not a list"}))

    assert key is not None
    assert key.startswith("dietHelperBackup_corrupt_")
    assert table.payloads[0]["document"] == {"foods": "not a list"}

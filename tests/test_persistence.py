"""Tests for the serialized save queue."""

import asyncio
from dataclasses import dataclass, field

import pytest

from diet_helper.domain.errors import PersistenceError
from diet_helper.domain.models import LOOSE, FoodDraft
from diet_helper.services.notices import SAVE_FAILED, NoticeBoard
from diet_helper.services.persistence import CatalogPersistence
from diet_helper.services.store import CatalogStore
from tests.conftest import InMemoryCatalogRepository


@dataclass
class GatedRepository(InMemoryCatalogRepository):
    """Repository whose writes block until the gate opens."""

    gate: asyncio.Event = field(default_factory=asyncio.Event)
    active_writes: int = 0
    max_active_writes: int = 0
    written_names: list[list[str]] = field(default_factory=list)

    async def save(self, document: dict[str, object]) -> None:
        self.active_writes += 1
        self.max_active_writes = max(self.max_active_writes, self.active_writes)
        await self.gate.wait()
        self.written_names.append([food["name"] for food in document["foods"]])
        self.active_writes -= 1
        await super().save(document)


def test_saves_never_overlap_and_last_snapshot_wins(store: CatalogStore) -> None:
    repository = GatedRepository()
    persistence = CatalogPersistence(repository)

    async def scenario() -> list[bool]:
        first = asyncio.create_task(persistence.save(store))
        await asyncio.sleep(0)
        store.add_food(LOOSE, FoodDraft(name="A"))
        second = asyncio.create_task(persistence.save(store))
        await asyncio.sleep(0)
        store.add_food(LOOSE, FoodDraft(name="B"))
        third = asyncio.create_task(persistence.save(store))
        await asyncio.sleep(0)
        repository.gate.set()
        return await asyncio.gather(first, second, third)

    results = asyncio.run(scenario())

    assert results == [True, False, True]
    assert repository.max_active_writes == 1
    assert repository.written_names == [[], ["A", "B"]]
    assert store.needs_save is False


def test_superseded_save_is_reported_as_saved(store: CatalogStore) -> None:
    repository = GatedRepository()
    persistence = CatalogPersistence(repository)
    notices = NoticeBoard()

    async def scenario() -> list[bool]:
        first = asyncio.create_task(persistence.save(store))
        await asyncio.sleep(0)
        store.add_food(LOOSE, FoodDraft(name="A"))
        reported = asyncio.create_task(persistence.save_and_report(store, notices))
        await asyncio.sleep(0)
        store.add_food(LOOSE, FoodDraft(name="B"))
        latest = asyncio.create_task(persistence.save(store))
        await asyncio.sleep(0)
        repository.gate.set()
        return await asyncio.gather(first, reported, latest)

    results = asyncio.run(scenario())

    assert results == [True, True, True]
    assert repository.written_names == [[], ["A", "B"]]
    assert notices.drain() == []


def test_load_sets_aside_document_with_wrong_shape() -> None:
    document = {"foods": [{"name": "No id"}]}
    repository = InMemoryCatalogRepository(document=document)

    with pytest.raises(PersistenceError):
        asyncio.run(CatalogPersistence(repository).load())

    assert repository.set_aside_documents == [document]


def test_save_and_report_turns_failure_into_notice(store: CatalogStore) -> None:
    repository = InMemoryCatalogRepository(fail_saves=True)
    notices = NoticeBoard()
    store.add_food(LOOSE, FoodDraft(name="A"))

    saved = asyncio.run(CatalogPersistence(repository).save_and_report(store, notices))

    assert saved is False
    assert store.needs_save is True
    assert [notice.text for notice in notices.drain()] == [SAVE_FAILED]


def test_notice_board_keeps_latest_notices() -> None:
    notices = NoticeBoard(limit=2)

    for text in ("one", "two", "three"):
        notices.info(text)

    assert [notice.text for notice in notices.drain()] == ["two", "three"]
    assert notices.drain() == []

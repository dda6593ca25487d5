"""Shared test fixtures."""

import copy
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from diet_helper.config import Settings
from diet_helper.containers import AppContainer
from diet_helper.domain.errors import ImageIOError
from diet_helper.services.catalog import CatalogService
from diet_helper.services.ids import IdGenerator
from diet_helper.services.images import ImageService, ImageStore
from diet_helper.services.persistence import CatalogPersistence, CatalogRepository
from diet_helper.services.store import CatalogStore


@dataclass
class FrozenClock:
    """Clock that always returns the same millisecond timestamp."""

    now_ms: int = 1_700_000_000_000

    def __call__(self) -> int:
        return self.now_ms


@dataclass
class InMemoryCatalogRepository(CatalogRepository):
    """In-memory catalog repository that records every write."""

    document: dict[str, object] | None = None
    saved: list[dict[str, object]] = field(default_factory=list)
    backups: list[dict[str, object]] = field(default_factory=list)
    set_aside_documents: list[object] = field(default_factory=list)
    fail_load: bool = False
    fail_saves: bool = False

    async def load(self) -> dict[str, object] | None:
        if self.fail_load:
            raise OSError("storage unavailable")
        return copy.deepcopy(self.document)

    async def save(self, document: dict[str, object]) -> None:
        if self.fail_saves:
            raise OSError("disk full")
        self.saved.append(document)
        self.document = copy.deepcopy(document)

    async def create_backup(self, document: dict[str, object]) -> str:
        self.backups.append(document)
        return f"backup_{len(self.backups)}"

    async def set_aside(self, document: object) -> str | None:
        self.set_aside_documents.append(document)
        return f"corrupt_{len(self.set_aside_documents)}"


@dataclass
class InMemoryImageStore(ImageStore):
    """In-memory image store; listed paths fail to delete."""

    files: dict[str, bytes] = field(default_factory=dict)
    deleted: list[str] = field(default_factory=list)
    failing_paths: set[str] = field(default_factory=set)
    fail_saves: bool = False

    async def save(self, content: bytes, extension: str) -> str:
        if self.fail_saves:
            raise ImageIOError("no space left")
        path = f"images/food_{len(self.files) + 1}.{extension}"
        self.files[path] = content
        return path

    async def delete(self, path: str) -> None:
        if path in self.failing_paths:
            raise ImageIOError(f"cannot delete {path}")
        self.deleted.append(path)
        self.files.pop(path, None)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(data_dir=tmp_path, storage_backend="file")


@pytest.fixture
def store() -> CatalogStore:
    return CatalogStore(ids=IdGenerator(clock=FrozenClock()))


@pytest.fixture
def repository() -> InMemoryCatalogRepository:
    return InMemoryCatalogRepository()


@pytest.fixture
def image_store() -> InMemoryImageStore:
    return InMemoryImageStore()


@pytest.fixture
def service(
    store: CatalogStore,
    repository: InMemoryCatalogRepository,
    image_store: InMemoryImageStore,
) -> CatalogService:
    return CatalogService(
        store=store,
        persistence=CatalogPersistence(repository),
        images=ImageService(store=image_store),
    )


@pytest.fixture
def container(settings: Settings, service: CatalogService) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        catalog_service=service,
        close_resources=close_resources,
    )

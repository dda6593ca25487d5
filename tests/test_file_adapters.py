"""Tests for local file adapters."""

import asyncio
import json
from pathlib import Path

import pytest

from diet_helper.adapters.inline_image_store import InlineImageStore
from diet_helper.adapters.json_file_repository import JsonFileCatalogRepository
from diet_helper.adapters.local_image_store import LocalImageStore
from diet_helper.domain.errors import ImageIOError, PersistenceError
from diet_helper.services.images import from_data_url
from diet_helper.services.persistence import CatalogPersistence
from diet_helper.services.store import CatalogStore


def test_json_repository_missing_file_loads_none(tmp_path: Path) -> None:
    repository = JsonFileCatalogRepository.create(
        tmp_path / "data.json", tmp_path / "backups"
    )

    assert asyncio.run(repository.load()) is None


def test_json_repository_roundtrip(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "data.json"
    repository = JsonFileCatalogRepository.create(path, tmp_path / "backups")
    document = {"foods": [{"id": 1, "name": "Crème brûlée"}], "tags": []}

    asyncio.run(repository.save(document))

    assert "Crème brûlée" in path.read_text(encoding="utf-8")
    assert asyncio.run(repository.load()) == document
    assert not path.with_name("data.json.tmp").exists()


def test_json_repository_sets_corrupt_file_aside(tmp_path: Path) -> None:
    path = tmp_path / "data.json"
    path.write_text("{not json", encoding="utf-8")
    backups = tmp_path / "backups"
    repository = JsonFileCatalogRepository.create(path, backups)

    with pytest.raises(json.JSONDecodeError):
        asyncio.run(repository.load())

    copies = list(backups.glob("corrupt_*.json"))
    assert len(copies) == 1
    assert copies[0].read_text(encoding="utf-8") == "{not json"


def test_json_repository_sets_undecodable_file_aside(tmp_path: Path) -> None:
    path = tmp_path / "data.json"
    path.write_bytes(b"\xff\xfe garbage")
    backups = tmp_path / "backups"
    repository = JsonFileCatalogRepository.create(path, backups)

    with pytest.raises(UnicodeDecodeError):
        asyncio.run(repository.load())

    copies = list(backups.glob("corrupt_*.json"))
    assert [backup.read_bytes() for backup in copies] == [b"\xff\xfe garbage"]


def test_wrong_shape_survives_the_next_save(tmp_path: Path) -> None:
    path = tmp_path / "data.json"
    path.write_text('{"foods": [{"id": 1}]}', encoding="utf-8")
    backups = tmp_path / "backups"
    persistence = CatalogPersistence(JsonFileCatalogRepository.create(path, backups))

    with pytest.raises(PersistenceError):
        asyncio.run(persistence.load())
    asyncio.run(persistence.save(CatalogStore()))

    copies = list(backups.glob("corrupt_*.json"))
    assert len(copies) == 1
    assert json.loads(copies[0].read_text(encoding="utf-8")) == {
        "foods": [{"id": 1}]
    }
    assert json.loads(path.read_text(encoding="utf-8"))["foods"] == []


def test_json_repository_backup(tmp_path: Path) -> None:
    repository = JsonFileCatalogRepository.create(
        tmp_path / "data.json", tmp_path / "backups"
    )

    location = asyncio.run(repository.create_backup({"foods": []}))

    backup = Path(location)
    assert backup.parent == tmp_path / "backups"
    assert backup.name.startswith("backup_")
    assert json.loads(backup.read_text(encoding="utf-8")) == {"foods": []}


def test_local_image_store_save_and_delete(tmp_path: Path) -> None:
    images = LocalImageStore.create(tmp_path)

    relative = asyncio.run(images.save(b"png-bytes", "png"))

    assert relative.startswith("images/food_")
    assert (tmp_path / relative).read_bytes() == b"png-bytes"
    asyncio.run(images.delete(relative))
    assert not (tmp_path / relative).exists()
    asyncio.run(images.delete(relative))


def test_local_image_store_refuses_paths_outside_images(tmp_path: Path) -> None:
    (tmp_path / "data.json").write_text("{}", encoding="utf-8")
    images = LocalImageStore.create(tmp_path)

    with pytest.raises(ImageIOError):
        asyncio.run(images.delete("images/../data.json"))

    assert (tmp_path / "data.json").exists()


def test_inline_image_store_returns_data_url() -> None:
    images = InlineImageStore()

    data_url = asyncio.run(images.save(b"gif-bytes", "gif"))

    assert data_url.startswith("data:image/gif;base64,")
    assert from_data_url(data_url) == ("image/gif", b"gif-bytes")

"""Tests for the ASGI entrypoint."""

from fastapi.testclient import TestClient

from diet_helper.api.asgi import build_app
from diet_helper.config import Settings


def test_build_app_serves_catalog_from_settings(tmp_path) -> None:
    settings = Settings(data_dir=tmp_path, storage_backend="file")

    with TestClient(build_app(settings)) as client:
        client.post("/categories", json={"name": "Fruit"})

    assert (tmp_path / "data.json").exists()

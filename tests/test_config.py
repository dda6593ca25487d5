"""Tests for configuration parsing."""

from pathlib import Path

from diet_helper.config import Settings, parse_image_formats
from diet_helper.domain.validation import DEFAULT_IMAGE_FORMATS


def test_parse_image_formats_normalizes_entries() -> None:
    assert parse_image_formats(" PNG, .jpg ,,webp") == frozenset(
        {"png", "jpg", "webp"}
    )


def test_parse_image_formats_falls_back_to_defaults() -> None:
    assert parse_image_formats(None) == DEFAULT_IMAGE_FORMATS
    assert parse_image_formats(" , ") == DEFAULT_IMAGE_FORMATS


def test_settings_read_environment(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("DATA_DIR", str(tmp_path))
    monkeypatch.setenv("STORAGE_BACKEND", "supabase")
    monkeypatch.setenv("MAX_IMAGE_BYTES", "1024")

    settings = Settings()

    assert settings.data_dir == tmp_path
    assert settings.storage_backend == "supabase"
    assert settings.max_image_bytes == 1024
    assert settings.data_file == "data.json"

"""Application configuration."""

import os
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from diet_helper.domain.validation import DEFAULT_IMAGE_FORMATS, DEFAULT_MAX_IMAGE_BYTES

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    data_dir: Path = Path()
    data_file: str = "data.json"
    images_dir: str = "images"
    backups_dir: str = "backups"
    storage_backend: str = "file"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    supabase_table: str = "catalog_documents"
    storage_key: str = "dietHelperData"
    backup_prefix: str = "dietHelperBackup_"
    image_formats: str = ",".join(sorted(DEFAULT_IMAGE_FORMATS))
    max_image_bytes: int = DEFAULT_MAX_IMAGE_BYTES
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def parse_image_formats(raw: str | None) -> frozenset[str]:
    """Parse accepted image extensions from a comma-separated list."""
    if raw is None:
        return DEFAULT_IMAGE_FORMATS
    formats = {
        chunk.strip().lower().lstrip(".") for chunk in raw.split(",") if chunk.strip()
    }
    return frozenset(formats) or DEFAULT_IMAGE_FORMATS

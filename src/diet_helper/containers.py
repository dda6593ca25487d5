"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from diet_helper.adapters.inline_image_store import InlineImageStore
from diet_helper.adapters.json_file_repository import JsonFileCatalogRepository
from diet_helper.adapters.local_image_store import LocalImageStore
from diet_helper.adapters.supabase_catalog_repository import (
    SupabaseCatalogRepository,
)
from diet_helper.config import Settings, parse_image_formats
from diet_helper.services.catalog import CatalogService
from diet_helper.services.images import ImageService, ImageStore
from diet_helper.services.persistence import CatalogPersistence, CatalogRepository
from diet_helper.services.store import CatalogStore


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    catalog_service: CatalogService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    repository, image_store = build_storage(resolved_settings)
    catalog_service = CatalogService(
        store=CatalogStore(),
        persistence=CatalogPersistence(repository),
        images=ImageService(
            store=image_store,
            formats=parse_image_formats(resolved_settings.image_formats),
            max_bytes=resolved_settings.max_image_bytes,
        ),
    )

    async def close_resources() -> None:
        if catalog_service.store.needs_save:
            await catalog_service.save()

    return AppContainer(
        settings=resolved_settings,
        catalog_service=catalog_service,
        close_resources=close_resources,
    )


def build_storage(settings: Settings) -> tuple[CatalogRepository, ImageStore]:
    """Pick the catalog repository and image store for the configured backend."""
    if settings.storage_backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError(
                "Supabase storage requires SUPABASE_URL and SUPABASE_SERVICE_KEY"
            )
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        repository = SupabaseCatalogRepository.create(
            client,
            table=settings.supabase_table,
            storage_key=settings.storage_key,
            backup_prefix=settings.backup_prefix,
        )
        return repository, InlineImageStore()
    if settings.storage_backend != "file":
        raise ValueError(f"Unknown storage backend: {settings.storage_backend}")
    data_dir = settings.data_dir
    repository = JsonFileCatalogRepository.create(
        data_path=data_dir / settings.data_file,
        backups_dir=data_dir / settings.backups_dir,
    )
    return repository, LocalImageStore.create(data_dir, settings.images_dir)

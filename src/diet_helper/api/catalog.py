"""Catalog API endpoints."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Request

from diet_helper.api.schemas import (
    ContainerReorderRequest,
    DropRequest,
    FilterRequest,
    FoodCreateRequest,
    FoodMoveRequest,
    FoodRefPayload,
    FoodUpdateRequest,
    ImagePayload,
    NameRequest,
    ReorderRequest,
)
from diet_helper.domain.errors import NotFoundError
from diet_helper.domain.models import (
    LOOSE,
    CategoryLocator,
    Food,
    FoodDraft,
    FoodRef,
    Locator,
    Nutrition,
    SubgroupLocator,
)
from diet_helper.services.documents import (
    catalog_to_document,
    category_to_document,
    food_to_document,
)
from diet_helper.services.images import ImageUpload, from_data_url
from diet_helper.services.moves import DropOutcome

if TYPE_CHECKING:
    from diet_helper.services.catalog import CatalogService
    from diet_helper.services.store import CatalogStore

router = APIRouter(tags=["catalog"])

_LOCATOR_FIELDS = {"category_id", "subgroup_id", "image"}


def _service(request: Request) -> CatalogService:
    return request.app.state.container.catalog_service


@router.get("/catalog")
async def get_catalog(request: Request) -> dict[str, object]:
    """Return the whole catalog tree."""
    service = _service(request)
    return {
        "catalog": catalog_to_document(service.store.catalog),
        "food_count": service.store.food_count(),
        "unsaved": service.store.needs_save,
    }


# Categories and subgroups


@router.post("/categories", status_code=201)
async def create_category(body: NameRequest, request: Request) -> dict[str, object]:
    """Create a category."""
    category = await _service(request).add_category(body.name)
    return category_to_document(category)


@router.put("/categories/{category_id}")
async def rename_category(
    category_id: int, body: NameRequest, request: Request
) -> dict[str, bool]:
    """Rename a category."""
    changed = await _service(request).rename_category(category_id, body.name)
    return {"changed": changed}


@router.delete("/categories/{category_id}")
async def delete_category(category_id: int, request: Request) -> dict[str, object]:
    """Delete a category with its subgroups and foods."""
    category = await _service(request).delete_category(category_id)
    return {"deleted": category.id}


@router.post("/categories/reorder")
async def reorder_categories(
    body: ReorderRequest, request: Request
) -> dict[str, bool]:
    """Move a category to another position."""
    changed = await _service(request).reorder_categories(
        body.old_index, body.new_index
    )
    return {"changed": changed}


@router.post("/categories/{category_id}/subgroups", status_code=201)
async def create_subgroup(
    category_id: int, body: NameRequest, request: Request
) -> dict[str, object]:
    """Create a subgroup in a category."""
    subgroup = await _service(request).add_subgroup(category_id, body.name)
    return {"id": subgroup.id, "name": subgroup.name, "foods": []}


@router.put("/categories/{category_id}/subgroups/{subgroup_id}")
async def rename_subgroup(
    category_id: int, subgroup_id: int, body: NameRequest, request: Request
) -> dict[str, bool]:
    """Rename a subgroup."""
    changed = await _service(request).rename_subgroup(
        category_id, subgroup_id, body.name
    )
    return {"changed": changed}


@router.delete("/categories/{category_id}/subgroups/{subgroup_id}")
async def delete_subgroup(
    category_id: int, subgroup_id: int, request: Request
) -> dict[str, object]:
    """Delete a subgroup; its foods move up to the category."""
    subgroup = await _service(request).delete_subgroup(category_id, subgroup_id)
    return {"deleted": subgroup.id}


@router.post("/categories/{category_id}/subgroups/reorder")
async def reorder_subgroups(
    category_id: int, body: ReorderRequest, request: Request
) -> dict[str, bool]:
    """Move a subgroup to another position in its category."""
    changed = await _service(request).reorder_subgroups(
        category_id, body.old_index, body.new_index
    )
    return {"changed": changed}


# Foods


@router.post("/foods", status_code=201)
async def create_food(body: FoodCreateRequest, request: Request) -> dict[str, object]:
    """Create a food in the given container."""
    service = _service(request)
    locator = _locator(service.store, body.category_id, body.subgroup_id)
    draft = FoodDraft(
        name=body.name,
        tag_ids=tuple(body.tag_ids),
        notes=body.notes,
        nutrition=(
            Nutrition(**body.nutrition.model_dump()) if body.nutrition else None
        ),
        specific_data=body.specific_data,
    )
    food = await service.add_food(locator, draft, image=_upload(body.image))
    return _food_payload(service.store, FoodRef(locator, food.id), food)


@router.patch("/foods/{food_id}")
async def update_food(
    food_id: int, body: FoodUpdateRequest, request: Request
) -> dict[str, object]:
    """Edit the fields that were sent."""
    service = _service(request)
    locator = _locator(service.store, body.category_id, body.subgroup_id)
    patch = body.model_dump(exclude_unset=True, exclude=_LOCATOR_FIELDS)
    food = await service.update_food(
        food_id, locator, patch, image=_upload(body.image)
    )
    return _food_payload(service.store, FoodRef(locator, food.id), food)


@router.delete("/foods/{food_id}")
async def delete_food(
    food_id: int,
    request: Request,
    category_id: int | None = None,
    subgroup_id: int | None = None,
) -> dict[str, object]:
    """Delete a food and its stored image."""
    service = _service(request)
    locator = _locator(service.store, category_id, subgroup_id)
    food = await service.delete_food(food_id, locator)
    return {"deleted": food.id}


@router.post("/foods/{food_id}/move")
async def move_food(
    food_id: int, body: FoodMoveRequest, request: Request
) -> dict[str, object]:
    """Move a food to another container."""
    service = _service(request)
    source = _locator(service.store, body.source_category_id, body.source_subgroup_id)
    dest = _locator(service.store, body.dest_category_id, body.dest_subgroup_id)
    food = await service.move_food(food_id, source, dest, body.to_index)
    return _food_payload(service.store, FoodRef(dest, food.id), food)


@router.post("/containers/reorder")
async def reorder_foods(
    body: ContainerReorderRequest, request: Request
) -> dict[str, bool]:
    """Move a food within its container."""
    service = _service(request)
    locator = _locator(service.store, body.category_id, body.subgroup_id)
    changed = await service.reorder(locator, body.old_index, body.new_index)
    return {"changed": changed}


@router.post("/drops")
async def apply_drop(body: DropRequest, request: Request) -> dict[str, object]:
    """Apply a drag-and-drop outcome."""
    result = await _service(request).handle_drop(DropOutcome(**body.model_dump()))
    if result is None:
        return {"kind": "none", "message": None}
    message = result.transition.message if result.transition else None
    return {"kind": result.kind, "food_id": result.food_id, "message": message}


@router.get("/foods/visible")
async def visible_foods(request: Request) -> dict[str, object]:
    """Return the foods that pass the current filter."""
    service = _service(request)
    entries = service.visible_entries()
    return {
        "foods": [_food_payload(service.store, ref, food) for ref, food in entries]
    }


@router.get("/foods/{food_id}")
async def get_food(food_id: int, request: Request) -> dict[str, object]:
    """Return a food wherever it lives."""
    store = _service(request).store
    ref = store.locate_food(food_id)
    if ref is None:
        raise NotFoundError(f"Food {food_id} not found")
    return _food_payload(store, ref, store.find_food(food_id, ref.locator))


# Tags and filter


@router.post("/tags", status_code=201)
async def create_tag(body: NameRequest, request: Request) -> dict[str, object]:
    """Create a tag."""
    tag = await _service(request).add_tag(body.name)
    return {"id": tag.id, "name": tag.name}


@router.put("/tags/{tag_id}")
async def rename_tag(
    tag_id: int, body: NameRequest, request: Request
) -> dict[str, bool]:
    """Rename a tag."""
    changed = await _service(request).rename_tag(tag_id, body.name)
    return {"changed": changed}


@router.delete("/tags/{tag_id}")
async def delete_tag(tag_id: int, request: Request) -> dict[str, object]:
    """Delete a tag from the catalog and from every food."""
    tag = await _service(request).delete_tag(tag_id)
    return {"deleted": tag.id}


@router.get("/filter")
async def get_filter(request: Request) -> dict[str, object]:
    """Return the active tag filter."""
    tag_filter = _service(request).tag_filter
    return {
        "selected_tag_ids": sorted(tag_filter.selected_tag_ids),
        "match_any": tag_filter.match_any,
        "name_query": tag_filter.name_query,
    }


@router.put("/filter")
async def set_filter(body: FilterRequest, request: Request) -> dict[str, object]:
    """Replace the active tag filter. Unknown tag ids are dropped."""
    service = _service(request)
    known = service.store.tag_ids()
    tag_filter = service.tag_filter
    tag_filter.selected_tag_ids = {
        tag_id for tag_id in body.selected_tag_ids if tag_id in known
    }
    tag_filter.match_any = body.match_any
    tag_filter.name_query = body.name_query
    return await get_filter(request)


# Bulk mode


@router.post("/bulk/enter")
async def enter_bulk_mode(request: Request) -> dict[str, bool]:
    """Start bulk select mode."""
    selection = _service(request).selection
    selection.enter()
    return {"active": selection.active}


@router.post("/bulk/exit")
async def exit_bulk_mode(request: Request) -> dict[str, bool]:
    """Leave bulk select mode."""
    selection = _service(request).selection
    selection.exit()
    return {"active": selection.active}


@router.post("/bulk/toggle")
async def toggle_selection(
    body: FoodRefPayload, request: Request
) -> dict[str, object]:
    """Select or deselect one food."""
    service = _service(request)
    ref = FoodRef(
        _locator(service.store, body.category_id, body.subgroup_id), body.food_id
    )
    service.store.find_food(ref.food_id, ref.locator)
    selected = service.selection.toggle(ref)
    return {"selected": selected, "count": len(service.selection.selected)}


@router.post("/bulk/select-visible")
async def select_visible(request: Request) -> dict[str, int]:
    """Select every food that passes the filter."""
    service = _service(request)
    service.select_all_visible()
    return {"count": len(service.selection.selected)}


@router.post("/bulk/clear")
async def clear_selection(request: Request) -> dict[str, int]:
    """Empty the selection."""
    selection = _service(request).selection
    selection.clear()
    return {"count": len(selection.selected)}


@router.post("/bulk/delete")
async def bulk_delete(request: Request) -> dict[str, object]:
    """Delete every selected food."""
    result = await _service(request).bulk_delete()
    return {
        "deleted": [food.id for food in result.deleted],
        "missing": [ref.food_id for ref in result.missing],
        "saved": result.saved,
    }


# Storage


@router.post("/backups", status_code=201)
async def create_backup(request: Request) -> dict[str, str]:
    """Write a backup copy of the catalog."""
    location = await _service(request).create_backup()
    return {"location": location}


@router.get("/notices")
async def drain_notices(request: Request) -> dict[str, object]:
    """Return pending notices and clear them."""
    notices = _service(request).notices.drain()
    return {
        "notices": [
            {
                "level": notice.level,
                "text": notice.text,
                "created_at": notice.created_at.isoformat(),
            }
            for notice in notices
        ]
    }


def _locator(
    store: CatalogStore, category_id: int | None, subgroup_id: int | None
) -> Locator:
    """Build a locator; a subgroup without a category is looked up."""
    if subgroup_id is not None:
        if category_id is None:
            category_id = store.find_subgroup_owner(subgroup_id).id
        return SubgroupLocator(category_id, subgroup_id)
    if category_id is not None:
        return CategoryLocator(category_id)
    return LOOSE


def _upload(image: ImagePayload | None) -> ImageUpload | None:
    if image is None:
        return None
    _mime_type, content = from_data_url(image.data_url)
    return ImageUpload(filename=image.filename, content=content)


def _food_payload(store: CatalogStore, ref: FoodRef, food: Food) -> dict[str, object]:
    locator = ref.locator
    return {
        "category_id": getattr(locator, "category_id", None),
        "subgroup_id": getattr(locator, "subgroup_id", None),
        "food": food_to_document(food),
        "tag_names": store.tag_names(food.tag_ids),
    }

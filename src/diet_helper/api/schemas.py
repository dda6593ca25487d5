"""Pydantic models for catalog API payloads."""

from pydantic import BaseModel, Field


class NameRequest(BaseModel):
    """A name for a new or renamed entity."""

    name: str


class ReorderRequest(BaseModel):
    """Move the item at one position to another."""

    old_index: int
    new_index: int


class ContainerReorderRequest(ReorderRequest):
    """Reorder foods inside one container."""

    category_id: int | None = None
    subgroup_id: int | None = None


class NutritionPayload(BaseModel):
    """Nutrition facts entered by the user."""

    protein: float | None = None
    fat: float | None = None
    carbs: float | None = None
    fiber: float | None = None
    sugar: float | None = None
    sodium: float | None = None


class ImagePayload(BaseModel):
    """An image file sent as a base64 data URL."""

    filename: str
    data_url: str


class FoodCreateRequest(BaseModel):
    """A new food and the container it goes into."""

    category_id: int | None = None
    subgroup_id: int | None = None
    name: str
    tag_ids: list[int] = Field(default_factory=list)
    notes: str = ""
    nutrition: NutritionPayload | None = None
    specific_data: str = ""
    image: ImagePayload | None = None


class FoodUpdateRequest(BaseModel):
    """A partial food edit. Only fields that are sent are changed."""

    category_id: int | None = None
    subgroup_id: int | None = None
    name: str | None = None
    tag_ids: list[int] | None = None
    notes: str | None = None
    nutrition: NutritionPayload | None = None
    specific_data: str | None = None
    image: ImagePayload | None = None


class FoodMoveRequest(BaseModel):
    """Move a food from one container to another."""

    source_category_id: int | None = None
    source_subgroup_id: int | None = None
    dest_category_id: int | None = None
    dest_subgroup_id: int | None = None
    to_index: int


class DropRequest(BaseModel):
    """Drag-and-drop outcome reported by the UI."""

    source_container_id: str
    dest_container_id: str
    old_index: int
    new_index: int
    food_id: int


class FoodRefPayload(BaseModel):
    """Identifies a food and the container that holds it."""

    category_id: int | None = None
    subgroup_id: int | None = None
    food_id: int


class FilterRequest(BaseModel):
    """Tag filter selection."""

    selected_tag_ids: list[int] = Field(default_factory=list)
    match_any: bool = False
    name_query: str = ""

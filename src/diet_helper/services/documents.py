"""Conversion between the catalog tree and its persisted JSON document."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as SchemaError

from diet_helper.domain.errors import PersistenceError
from diet_helper.domain.models import (
    Catalog,
    Category,
    Food,
    Nutrition,
    Subgroup,
    Tag,
)
from diet_helper.domain.validation import unique_tag_ids


class NutritionDocument(BaseModel):
    """Persisted nutrition facts."""

    model_config = ConfigDict(extra="ignore")

    protein: float | None = None
    fat: float | None = None
    carbs: float | None = None
    fiber: float | None = None
    sugar: float | None = None
    sodium: float | None = None


class FoodDocument(BaseModel):
    """Persisted food. Older documents may lack every optional field."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    image_url: str = Field(
        default="", validation_alias=AliasChoices("imageUrl", "image_url")
    )
    selected: bool = False
    tag_ids: list[int] = Field(
        default_factory=list, validation_alias=AliasChoices("tags", "tagIds")
    )
    notes: str = ""
    nutrition: NutritionDocument | None = None
    specific_data: str = Field(
        default="", validation_alias=AliasChoices("specificData", "specific_data")
    )

    @field_validator("image_url", "notes", "specific_data", mode="before")
    @classmethod
    def _blank_when_null(cls, value: object) -> object:
        return "" if value is None else value

    @field_validator("tag_ids", mode="before")
    @classmethod
    def _empty_when_null(cls, value: object) -> object:
        return [] if value is None else value

    @field_validator("selected", mode="before")
    @classmethod
    def _false_when_null(cls, value: object) -> object:
        return False if value is None else value


class SubgroupDocument(BaseModel):
    """Persisted subgroup."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    foods: list[FoodDocument] = Field(default_factory=list)

    @field_validator("foods", mode="before")
    @classmethod
    def _empty_when_null(cls, value: object) -> object:
        return [] if value is None else value


class CategoryDocument(BaseModel):
    """Persisted category."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str
    foods: list[FoodDocument] = Field(default_factory=list)
    subgroups: list[SubgroupDocument] = Field(default_factory=list)

    @field_validator("foods", "subgroups", mode="before")
    @classmethod
    def _empty_when_null(cls, value: object) -> object:
        return [] if value is None else value


class TagDocument(BaseModel):
    """Persisted tag."""

    model_config = ConfigDict(extra="ignore")

    id: int
    name: str


class CatalogDocument(BaseModel):
    """The whole persisted catalog."""

    model_config = ConfigDict(extra="ignore")

    foods: list[FoodDocument] = Field(default_factory=list)
    tags: list[TagDocument] = Field(default_factory=list)
    categories: list[CategoryDocument] = Field(default_factory=list)

    @field_validator("foods", "tags", "categories", mode="before")
    @classmethod
    def _empty_when_null(cls, value: object) -> object:
        return [] if value is None else value


def catalog_from_document(raw: object) -> Catalog:
    """Build a catalog from a loaded document, filling in missing fields."""
    if raw is None:
        return Catalog()
    try:
        document = CatalogDocument.model_validate(raw)
    except SchemaError as exc:
        raise PersistenceError(
            f"Catalog document has an invalid shape ({exc.error_count()} errors)"
        ) from exc
    return Catalog(
        categories=[_category_from_document(item) for item in document.categories],
        loose_foods=[_food_from_document(item) for item in document.foods],
        tags=[Tag(id=item.id, name=item.name) for item in document.tags],
    )


def catalog_to_document(catalog: Catalog) -> dict[str, object]:
    """Serialize a catalog into a JSON-compatible document."""
    return {
        "foods": [food_to_document(food) for food in catalog.loose_foods],
        "tags": [{"id": tag.id, "name": tag.name} for tag in catalog.tags],
        "categories": [
            category_to_document(category) for category in catalog.categories
        ],
    }


def category_to_document(category: Category) -> dict[str, object]:
    """Serialize a category with its foods and subgroups."""
    return {
        "id": category.id,
        "name": category.name,
        "foods": [food_to_document(food) for food in category.foods],
        "subgroups": [
            {
                "id": subgroup.id,
                "name": subgroup.name,
                "foods": [food_to_document(food) for food in subgroup.foods],
            }
            for subgroup in category.subgroups
        ],
    }


def food_to_document(food: Food) -> dict[str, object]:
    """Serialize a food using the persisted key names."""
    nutrition = food.nutrition
    return {
        "id": food.id,
        "name": food.name,
        "imageUrl": food.image_url,
        "selected": food.selected,
        "tags": list(food.tag_ids),
        "notes": food.notes,
        "nutrition": {
            "protein": nutrition.protein,
            "fat": nutrition.fat,
            "carbs": nutrition.carbs,
            "fiber": nutrition.fiber,
            "sugar": nutrition.sugar,
            "sodium": nutrition.sodium,
        },
        "specificData": food.specific_data,
    }


def _category_from_document(document: CategoryDocument) -> Category:
    return Category(
        id=document.id,
        name=document.name,
        foods=[_food_from_document(item) for item in document.foods],
        subgroups=[
            Subgroup(
                id=subgroup.id,
                name=subgroup.name,
                foods=[_food_from_document(item) for item in subgroup.foods],
            )
            for subgroup in document.subgroups
        ],
    )


def _food_from_document(document: FoodDocument) -> Food:
    nutrition = (
        Nutrition(**document.nutrition.model_dump())
        if document.nutrition is not None
        else Nutrition()
    )
    return Food(
        id=document.id,
        name=document.name,
        image_url=document.image_url,
        selected=document.selected,
        tag_ids=unique_tag_ids(document.tag_ids),
        notes=document.notes,
        nutrition=nutrition,
        specific_data=document.specific_data,
    )

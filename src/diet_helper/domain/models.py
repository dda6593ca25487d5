"""Domain models for the food catalog."""

from dataclasses import dataclass, field

NUTRITION_FIELDS = ("protein", "fat", "carbs", "fiber", "sugar", "sodium")


@dataclass
class Tag:
    """A label that foods reference by id."""

    id: int
    name: str


@dataclass
class Nutrition:
    """Optional nutrition facts for a food; None means not recorded."""

    protein: float | None = None
    fat: float | None = None
    carbs: float | None = None
    fiber: float | None = None
    sugar: float | None = None
    sodium: float | None = None

    def is_empty(self) -> bool:
        """Return True when no nutrition value has been recorded."""
        return all(getattr(self, name) is None for name in NUTRITION_FIELDS)


@dataclass
class Food:
    """A food item stored in exactly one container."""

    id: int
    name: str
    image_url: str = ""
    selected: bool = False
    tag_ids: list[int] = field(default_factory=list)
    notes: str = ""
    nutrition: Nutrition = field(default_factory=Nutrition)
    specific_data: str = ""


@dataclass
class Subgroup:
    """A named group of foods inside a category."""

    id: int
    name: str
    foods: list[Food] = field(default_factory=list)


@dataclass
class Category:
    """Top-level container with direct foods and subgroups."""

    id: int
    name: str
    foods: list[Food] = field(default_factory=list)
    subgroups: list[Subgroup] = field(default_factory=list)


@dataclass
class Catalog:
    """Root of the catalog tree."""

    categories: list[Category] = field(default_factory=list)
    loose_foods: list[Food] = field(default_factory=list)
    tags: list[Tag] = field(default_factory=list)


@dataclass(frozen=True)
class LooseLocator:
    """Points at the legacy flat food list."""


@dataclass(frozen=True)
class CategoryLocator:
    """Points at a category's direct foods."""

    category_id: int


@dataclass(frozen=True)
class SubgroupLocator:
    """Points at a subgroup's foods."""

    category_id: int
    subgroup_id: int


Locator = LooseLocator | CategoryLocator | SubgroupLocator

LOOSE = LooseLocator()


@dataclass(frozen=True)
class FoodRef:
    """A food id together with the container that holds it."""

    locator: Locator
    food_id: int


@dataclass(frozen=True)
class FoodDraft:
    """User input for a new food."""

    name: str
    image_url: str = ""
    tag_ids: tuple[int, ...] = ()
    notes: str = ""
    nutrition: Nutrition | None = None
    specific_data: str = ""

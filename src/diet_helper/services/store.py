"""In-memory catalog store: the only code that mutates the catalog tree."""

from dataclasses import asdict, dataclass, field, fields

from diet_helper.domain.errors import NotFoundError, RangeError, ValidationError
from diet_helper.domain.models import (
    NUTRITION_FIELDS,
    Catalog,
    Category,
    CategoryLocator,
    Food,
    FoodDraft,
    FoodRef,
    Locator,
    LooseLocator,
    Nutrition,
    Subgroup,
    SubgroupLocator,
    Tag,
)
from diet_helper.domain.validation import (
    CATEGORY_NAME_REQUIRED,
    MAX_FOODS_REACHED,
    MAX_TAGS_REACHED,
    MAX_TOTAL_FOODS,
    MAX_TOTAL_TAGS,
    SUBGROUP_NAME_REQUIRED,
    TAG_NAME_MAX_LENGTH,
    TAG_NAME_TOO_LONG,
    food_name_errors,
    tag_ids_errors,
    tag_name_errors,
    unique_tag_ids,
)
from diet_helper.services.ids import IdGenerator

FOOD_PATCH_FIELDS = frozenset(
    {"name", "image_url", "notes", "nutrition", "specific_data", "tag_ids"}
)
LOOSE_LABEL = "Unsorted"


@dataclass
class CatalogStore:
    """Owns the catalog tree and applies every mutation to it.

    Mutations are synchronous. Each state change bumps ``revision``; callers
    persist the tree and report the written revision through ``mark_saved``.
    """

    catalog: Catalog = field(default_factory=Catalog)
    ids: IdGenerator = field(default_factory=IdGenerator)
    revision: int = 0
    saved_revision: int = 0

    @property
    def needs_save(self) -> bool:
        """Return True when memory holds changes not yet written."""
        return self.revision != self.saved_revision

    def mark_saved(self, revision: int) -> None:
        """Record that the given revision reached storage."""
        self.saved_revision = max(self.saved_revision, revision)

    def replace_catalog(self, catalog: Catalog) -> None:
        """Swap in a freshly loaded catalog."""
        self.catalog = catalog
        for entity_id in _entity_ids(catalog):
            self.ids.observe(entity_id)
        self.saved_revision = self.revision

    # Categories

    def get_category(self, category_id: int) -> Category:
        """Return a category by id."""
        index = _index_of(self.catalog.categories, category_id)
        if index is None:
            raise NotFoundError(f"Category {category_id} not found")
        return self.catalog.categories[index]

    def add_category(self, name: str) -> Category:
        """Append a new category."""
        cleaned = name.strip()
        if not cleaned:
            raise ValidationError([CATEGORY_NAME_REQUIRED])
        category = Category(id=self.ids.next_id(), name=cleaned)
        self.catalog.categories.append(category)
        self._touch()
        return category

    def rename_category(self, category_id: int, new_name: str) -> bool:
        """Rename a category; return False when nothing changed."""
        return self._rename(self.get_category(category_id), new_name)

    def delete_category(self, category_id: int) -> Category:
        """Remove a category together with all of its foods and subgroups."""
        index = _index_of(self.catalog.categories, category_id)
        if index is None:
            raise NotFoundError(f"Category {category_id} not found")
        category = self.catalog.categories.pop(index)
        self._touch()
        return category

    def reorder_categories(self, old_index: int, new_index: int) -> bool:
        """Move a category to a new position."""
        return self._reorder(self.catalog.categories, old_index, new_index)

    # Subgroups

    def get_subgroup(self, category_id: int, subgroup_id: int) -> Subgroup:
        """Return a subgroup of a category."""
        category = self.get_category(category_id)
        index = _index_of(category.subgroups, subgroup_id)
        if index is None:
            raise NotFoundError(
                f"Subgroup {subgroup_id} not found in category {category_id}"
            )
        return category.subgroups[index]

    def find_subgroup_owner(self, subgroup_id: int) -> Category:
        """Return the category that owns a subgroup."""
        for category in self.catalog.categories:
            if _index_of(category.subgroups, subgroup_id) is not None:
                return category
        raise NotFoundError(f"Subgroup {subgroup_id} not found")

    def add_subgroup(self, category_id: int, name: str) -> Subgroup:
        """Append a new subgroup to a category."""
        category = self.get_category(category_id)
        cleaned = name.strip()
        if not cleaned:
            raise ValidationError([SUBGROUP_NAME_REQUIRED])
        subgroup = Subgroup(id=self.ids.next_id(), name=cleaned)
        category.subgroups.append(subgroup)
        self._touch()
        return subgroup

    def rename_subgroup(
        self, category_id: int, subgroup_id: int, new_name: str
    ) -> bool:
        """Rename a subgroup; return False when nothing changed."""
        return self._rename(self.get_subgroup(category_id, subgroup_id), new_name)

    def delete_subgroup(self, category_id: int, subgroup_id: int) -> Subgroup:
        """Remove a subgroup, moving its foods to the end of the category."""
        category = self.get_category(category_id)
        index = _index_of(category.subgroups, subgroup_id)
        if index is None:
            raise NotFoundError(
                f"Subgroup {subgroup_id} not found in category {category_id}"
            )
        subgroup = category.subgroups.pop(index)
        category.foods.extend(subgroup.foods)
        subgroup.foods = []
        self._touch()
        return subgroup

    def reorder_subgroups(
        self, category_id: int, old_index: int, new_index: int
    ) -> bool:
        """Move a subgroup to a new position within its category."""
        category = self.get_category(category_id)
        return self._reorder(category.subgroups, old_index, new_index)

    # Foods

    def foods_at(self, locator: Locator) -> list[Food]:
        """Return the live food sequence a locator points at."""
        if isinstance(locator, LooseLocator):
            return self.catalog.loose_foods
        if isinstance(locator, CategoryLocator):
            return self.get_category(locator.category_id).foods
        if isinstance(locator, SubgroupLocator):
            return self.get_subgroup(locator.category_id, locator.subgroup_id).foods
        raise NotFoundError(f"Unsupported locator: {locator!r}")

    def food_entries(self) -> list[tuple[FoodRef, Food]]:
        """Flatten every food with its location, in display order."""
        entries = [
            (FoodRef(LooseLocator(), food.id), food)
            for food in self.catalog.loose_foods
        ]
        for category in self.catalog.categories:
            direct = CategoryLocator(category.id)
            entries.extend((FoodRef(direct, food.id), food) for food in category.foods)
            for subgroup in category.subgroups:
                nested = SubgroupLocator(category.id, subgroup.id)
                entries.extend(
                    (FoodRef(nested, food.id), food) for food in subgroup.foods
                )
        return entries

    def food_count(self) -> int:
        """Return the number of foods across all containers."""
        return len(self.food_entries())

    def find_food(self, food_id: int, locator: Locator) -> Food:
        """Return a food from the container a locator points at."""
        foods = self.foods_at(locator)
        index = _index_of(foods, food_id)
        if index is None:
            raise NotFoundError(
                f"Food {food_id} not found in {self.container_label(locator)}"
            )
        return foods[index]

    def locate_food(self, food_id: int) -> FoodRef | None:
        """Return where a food currently lives, if anywhere."""
        for ref, _food in self.food_entries():
            if ref.food_id == food_id:
                return ref
        return None

    def add_food(self, locator: Locator, draft: FoodDraft) -> Food:
        """Validate a draft and append it to a container as a new food."""
        foods = self.foods_at(locator)
        tag_ids = unique_tag_ids(draft.tag_ids)
        errors = food_name_errors(draft.name)
        errors.extend(tag_ids_errors(tag_ids, self.tag_ids()))
        nutrition, nutrition_errors = _coerce_nutrition(draft.nutrition)
        errors.extend(nutrition_errors)
        if self.food_count() >= MAX_TOTAL_FOODS:
            errors.append(MAX_FOODS_REACHED)
        if errors:
            raise ValidationError(errors)
        food = Food(
            id=self.ids.next_id(),
            name=draft.name.strip(),
            image_url=draft.image_url,
            tag_ids=tag_ids,
            notes=draft.notes.strip(),
            nutrition=nutrition,
            specific_data=draft.specific_data.strip(),
        )
        foods.append(food)
        self._touch()
        return food

    def update_food(
        self, food_id: int, locator: Locator, patch: dict[str, object]
    ) -> Food:
        """Apply a validated partial update to a food in place."""
        food = self.find_food(food_id, locator)
        unknown = sorted(set(patch) - FOOD_PATCH_FIELDS)
        errors = [f"Unknown field: {key}" for key in unknown]
        changes: dict[str, object] = {}

        if "name" in patch:
            name = str(patch["name"] or "")
            errors.extend(food_name_errors(name))
            changes["name"] = name.strip()
        if "tag_ids" in patch:
            tag_ids = unique_tag_ids(patch["tag_ids"] or [])
            errors.extend(tag_ids_errors(tag_ids, self.tag_ids()))
            changes["tag_ids"] = tag_ids
        if "nutrition" in patch:
            nutrition, nutrition_errors = _coerce_nutrition(patch["nutrition"])
            errors.extend(nutrition_errors)
            changes["nutrition"] = nutrition
        for key in ("image_url", "notes", "specific_data"):
            if key not in patch:
                continue
            value = patch[key]
            if value is None:
                value = ""
            if not isinstance(value, str):
                errors.append(f"Field {key} must be text")
                continue
            changes[key] = value if key == "image_url" else value.strip()

        if errors:
            raise ValidationError(errors)
        for key, value in changes.items():
            setattr(food, key, value)
        if changes:
            self._touch()
        return food

    def delete_food(self, food_id: int, locator: Locator) -> Food:
        """Remove a food from its container and return it."""
        foods = self.foods_at(locator)
        index = _index_of(foods, food_id)
        if index is None:
            raise NotFoundError(
                f"Food {food_id} not found in {self.container_label(locator)}"
            )
        food = foods.pop(index)
        self._touch()
        return food

    def reorder(self, container: Locator, old_index: int, new_index: int) -> bool:
        """Move a food within one container; return False for a no-op."""
        return self._reorder(self.foods_at(container), old_index, new_index)

    def move_food(
        self, food_id: int, source: Locator, dest: Locator, to_index: int
    ) -> Food:
        """Transfer a food between containers, inserting at a clamped index."""
        source_foods = self.foods_at(source)
        dest_foods = self.foods_at(dest)
        index = _index_of(source_foods, food_id)
        if index is None:
            raise NotFoundError(
                f"Food {food_id} not found in {self.container_label(source)}"
            )
        food = source_foods.pop(index)
        dest_foods.insert(min(max(to_index, 0), len(dest_foods)), food)
        self._touch()
        return food

    # Tags

    def tag_ids(self) -> set[int]:
        """Return the ids of all existing tags."""
        return {tag.id for tag in self.catalog.tags}

    def get_tag(self, tag_id: int) -> Tag:
        """Return a tag by id."""
        index = _index_of(self.catalog.tags, tag_id)
        if index is None:
            raise NotFoundError(f"Tag {tag_id} not found")
        return self.catalog.tags[index]

    def add_tag(self, name: str) -> Tag:
        """Append a new tag. Names need not be unique."""
        errors = tag_name_errors(name)
        if len(self.catalog.tags) >= MAX_TOTAL_TAGS:
            errors.append(MAX_TAGS_REACHED)
        if errors:
            raise ValidationError(errors)
        tag = Tag(id=self.ids.next_id(), name=name.strip())
        self.catalog.tags.append(tag)
        self._touch()
        return tag

    def rename_tag(self, tag_id: int, new_name: str) -> bool:
        """Rename a tag; return False when nothing changed."""
        tag = self.get_tag(tag_id)
        if len(new_name.strip()) > TAG_NAME_MAX_LENGTH:
            raise ValidationError([TAG_NAME_TOO_LONG])
        return self._rename(tag, new_name)

    def delete_tag(self, tag_id: int) -> Tag:
        """Remove a tag and strip its id from every food in every container."""
        index = _index_of(self.catalog.tags, tag_id)
        if index is None:
            raise NotFoundError(f"Tag {tag_id} not found")
        tag = self.catalog.tags.pop(index)
        for _ref, food in self.food_entries():
            if tag_id in food.tag_ids:
                food.tag_ids = [value for value in food.tag_ids if value != tag_id]
        self._touch()
        return tag

    def tag_names(self, tag_ids: list[int]) -> list[str]:
        """Return names for tag ids, skipping ids that no longer resolve."""
        names = {tag.id: tag.name for tag in self.catalog.tags}
        return [names[tag_id] for tag_id in tag_ids if tag_id in names]

    def container_label(self, locator: Locator) -> str:
        """Return a human-readable name for a container."""
        if isinstance(locator, CategoryLocator):
            return self.get_category(locator.category_id).name
        if isinstance(locator, SubgroupLocator):
            category = self.get_category(locator.category_id)
            subgroup = self.get_subgroup(locator.category_id, locator.subgroup_id)
            return f"{category.name} / {subgroup.name}"
        return LOOSE_LABEL

    def _rename(self, entity: Category | Subgroup | Tag, new_name: str) -> bool:
        cleaned = new_name.strip()
        if not cleaned or cleaned == entity.name:
            return False
        entity.name = cleaned
        self._touch()
        return True

    def _reorder(self, items: list, old_index: int, new_index: int) -> bool:
        size = len(items)
        if not (0 <= old_index < size and 0 <= new_index < size):
            raise RangeError(
                f"Cannot move position {old_index} to {new_index} "
                f"in a sequence of {size}"
            )
        if old_index == new_index:
            return False
        items.insert(new_index, items.pop(old_index))
        self._touch()
        return True

    def _touch(self) -> None:
        self.revision += 1


def _index_of(items: list, entity_id: int) -> int | None:
    for index, item in enumerate(items):
        if item.id == entity_id:
            return index
    return None


def _coerce_nutrition(value: object) -> tuple[Nutrition, list[str]]:
    if value is None:
        return Nutrition(), []
    if isinstance(value, Nutrition):
        value = asdict(value)
    if not isinstance(value, dict):
        return Nutrition(), ["Nutrition must be an object"]
    errors = [
        f"Unknown nutrition field: {key}"
        for key in value
        if key not in NUTRITION_FIELDS
    ]
    amounts: dict[str, float | None] = {}
    for item in fields(Nutrition):
        raw = value.get(item.name)
        if raw is None:
            amounts[item.name] = None
        elif isinstance(raw, int | float) and not isinstance(raw, bool):
            amounts[item.name] = float(raw)
        else:
            errors.append(f"Nutrition {item.name} must be a number")
    return Nutrition(**amounts), errors


def _entity_ids(catalog: Catalog) -> list[int]:
    ids = [tag.id for tag in catalog.tags]
    ids.extend(food.id for food in catalog.loose_foods)
    for category in catalog.categories:
        ids.append(category.id)
        ids.extend(food.id for food in category.foods)
        for subgroup in category.subgroups:
            ids.append(subgroup.id)
            ids.extend(food.id for food in subgroup.foods)
    return ids

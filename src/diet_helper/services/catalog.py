"""Application service coordinating the catalog store with storage."""

import logging
from dataclasses import dataclass, field, replace

from diet_helper.domain.errors import CatalogError, ModeError, PersistenceError
from diet_helper.domain.models import (
    Category,
    CategoryLocator,
    Food,
    FoodDraft,
    FoodRef,
    Locator,
    Subgroup,
    SubgroupLocator,
    Tag,
)
from diet_helper.services.filters import TagFilter
from diet_helper.services.images import ImageService, ImageUpload
from diet_helper.services.moves import DropOutcome, MoveResolver, MoveResult
from diet_helper.services.notices import LOAD_FAILED, NoticeBoard
from diet_helper.services.persistence import CatalogPersistence
from diet_helper.services.selection import BulkDeleteResult, SelectionController
from diet_helper.services.store import CatalogStore

_logger = logging.getLogger(__name__)


@dataclass
class CatalogService:
    """Runs catalog operations: mutate memory first, then persist.

    Validation and lookup errors propagate before anything changes. Storage
    failures are logged and turned into notices; the in-memory change stays.
    """

    store: CatalogStore
    persistence: CatalogPersistence
    images: ImageService
    notices: NoticeBoard = field(default_factory=NoticeBoard)
    tag_filter: TagFilter = field(default_factory=TagFilter)
    selection: SelectionController = field(init=False)
    resolver: MoveResolver = field(init=False)

    def __post_init__(self) -> None:
        self.selection = SelectionController(
            store=self.store,
            images=self.images,
            persistence=self.persistence,
            notices=self.notices,
        )
        self.resolver = MoveResolver(self.store)

    async def load(self) -> bool:
        """Replace the in-memory catalog with the stored one."""
        try:
            catalog = await self.persistence.load()
        except PersistenceError:
            _logger.exception("Failed to load catalog")
            self.notices.error(LOAD_FAILED)
            return False
        self.store.replace_catalog(catalog)
        self.selection.exit()
        self.tag_filter.clear()
        return True

    async def save(self) -> bool:
        """Persist the current tree, reporting failures as notices."""
        return await self.persistence.save_and_report(self.store, self.notices)

    async def create_backup(self) -> str:
        """Write a timestamped backup of the current tree."""
        try:
            return await self.persistence.create_backup(self.store)
        except PersistenceError:
            _logger.exception("Failed to create backup")
            self.notices.error("Failed to create backup")
            raise

    # Categories and subgroups

    async def add_category(self, name: str) -> Category:
        """Create a category."""
        category = self.store.add_category(name)
        await self.save()
        return category

    async def rename_category(self, category_id: int, new_name: str) -> bool:
        """Rename a category, saving only when the name changed."""
        changed = self.store.rename_category(category_id, new_name)
        if changed:
            await self.save()
        return changed

    async def delete_category(self, category_id: int) -> Category:
        """Delete a category with everything in it."""
        category = self.store.delete_category(category_id)
        foods = list(category.foods)
        for subgroup in category.subgroups:
            foods.extend(subgroup.foods)
        await self._discard_images(foods)
        await self.save()
        return category

    async def reorder_categories(self, old_index: int, new_index: int) -> bool:
        """Move a category to a new position."""
        self._require_reorder_allowed()
        changed = self.store.reorder_categories(old_index, new_index)
        if changed:
            await self.save()
        return changed

    async def add_subgroup(self, category_id: int, name: str) -> Subgroup:
        """Create a subgroup inside a category."""
        subgroup = self.store.add_subgroup(category_id, name)
        await self.save()
        return subgroup

    async def rename_subgroup(
        self, category_id: int, subgroup_id: int, new_name: str
    ) -> bool:
        """Rename a subgroup, saving only when the name changed."""
        changed = self.store.rename_subgroup(category_id, subgroup_id, new_name)
        if changed:
            await self.save()
        return changed

    async def delete_subgroup(self, category_id: int, subgroup_id: int) -> Subgroup:
        """Delete a subgroup; its foods move to the parent category."""
        subgroup = self.store.delete_subgroup(category_id, subgroup_id)
        self._relocate_selection(
            SubgroupLocator(category_id, subgroup_id), CategoryLocator(category_id)
        )
        await self.save()
        return subgroup

    async def reorder_subgroups(
        self, category_id: int, old_index: int, new_index: int
    ) -> bool:
        """Move a subgroup to a new position within its category."""
        self._require_reorder_allowed()
        changed = self.store.reorder_subgroups(category_id, old_index, new_index)
        if changed:
            await self.save()
        return changed

    # Foods

    async def add_food(
        self, locator: Locator, draft: FoodDraft, image: ImageUpload | None = None
    ) -> Food:
        """Create a food, storing its image first when one is given."""
        image_url = ""
        if image is not None:
            image_url = await self.images.save_upload(image)
            draft = replace(draft, image_url=image_url)
        try:
            food = self.store.add_food(locator, draft)
        except CatalogError:
            await self.images.discard(image_url)
            raise
        await self.save()
        return food

    async def update_food(
        self,
        food_id: int,
        locator: Locator,
        patch: dict[str, object],
        image: ImageUpload | None = None,
    ) -> Food:
        """Edit a food; a replaced image file is cleaned up afterwards.

        When the new image cannot be stored the food keeps its old one.
        """
        previous_url = self.store.find_food(food_id, locator).image_url
        new_url = ""
        if image is not None:
            new_url = await self.images.save_upload(image)
            if new_url:
                patch = {**patch, "image_url": new_url}
        try:
            food = self.store.update_food(food_id, locator, patch)
        except CatalogError:
            await self.images.discard(new_url)
            raise
        if food.image_url != previous_url:
            await self.images.discard(previous_url)
        await self.save()
        return food

    async def delete_food(self, food_id: int, locator: Locator) -> Food:
        """Delete a food and its image file."""
        food = self.store.delete_food(food_id, locator)
        self.selection.selected.discard(FoodRef(locator, food_id))
        await self.images.discard(food.image_url)
        await self.save()
        return food

    async def reorder(
        self, container: Locator, old_index: int, new_index: int
    ) -> bool:
        """Move a food within one container."""
        self._require_reorder_allowed()
        changed = self.store.reorder(container, old_index, new_index)
        if changed:
            await self.save()
        return changed

    async def move_food(
        self, food_id: int, source: Locator, dest: Locator, to_index: int
    ) -> Food:
        """Move a food to another container."""
        self._require_reorder_allowed()
        food = self.store.move_food(food_id, source, dest, to_index)
        await self.save()
        return food

    async def handle_drop(self, outcome: DropOutcome) -> MoveResult | None:
        """Apply a drag-and-drop outcome and announce cross-container moves."""
        self._require_reorder_allowed()
        result = self.resolver.resolve(outcome)
        if result is None:
            return None
        if result.transition is not None:
            self.notices.info(result.transition.message)
        await self.save()
        return result

    def visible_entries(self) -> list[tuple[FoodRef, Food]]:
        """Return the foods that pass the current filter."""
        return self.tag_filter.apply(self.store.food_entries())

    # Tags

    async def add_tag(self, name: str) -> Tag:
        """Create a tag."""
        tag = self.store.add_tag(name)
        await self.save()
        return tag

    async def rename_tag(self, tag_id: int, new_name: str) -> bool:
        """Rename a tag, saving only when the name changed."""
        changed = self.store.rename_tag(tag_id, new_name)
        if changed:
            await self.save()
        return changed

    async def delete_tag(self, tag_id: int) -> Tag:
        """Delete a tag from the catalog, every food and the filter."""
        tag = self.store.delete_tag(tag_id)
        self.tag_filter.discard(tag_id)
        await self.save()
        return tag

    # Bulk mode

    def select_all_visible(self) -> None:
        """Add every currently visible food to the selection."""
        self.selection.select_all_visible(
            ref for ref, _food in self.visible_entries()
        )

    async def bulk_delete(self) -> BulkDeleteResult:
        """Delete the selected foods with a single save."""
        result = await self.selection.bulk_delete()
        if result.deleted:
            self.notices.info(f"Deleted {len(result.deleted)} foods")
        return result

    def _relocate_selection(self, old: Locator, new: Locator) -> None:
        moved = {ref for ref in self.selection.selected if ref.locator == old}
        self.selection.selected -= moved
        self.selection.selected |= {FoodRef(new, ref.food_id) for ref in moved}

    async def _discard_images(self, foods: list[Food]) -> None:
        for food in foods:
            await self.images.discard(food.image_url)

    def _require_reorder_allowed(self) -> None:
        if self.selection.active:
            raise ModeError("Reordering is disabled in bulk select mode")

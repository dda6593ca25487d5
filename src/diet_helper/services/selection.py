"""Bulk selection of foods and batch deletion."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from diet_helper.domain.errors import ModeError, NotFoundError
from diet_helper.domain.models import Food, FoodRef
from diet_helper.services.images import ImageService
from diet_helper.services.notices import NoticeBoard
from diet_helper.services.persistence import CatalogPersistence
from diet_helper.services.store import CatalogStore

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BulkDeleteResult:
    """Outcome of a bulk delete."""

    deleted: list[Food]
    missing: list[FoodRef]
    saved: bool


@dataclass
class SelectionController:
    """Tracks selected foods while bulk select mode is active."""

    store: CatalogStore
    images: ImageService
    persistence: CatalogPersistence
    notices: NoticeBoard
    active: bool = False
    selected: set[FoodRef] = field(default_factory=set)

    def enter(self) -> None:
        """Start bulk select mode with an empty selection."""
        self.selected.clear()
        self.active = True

    def exit(self) -> None:
        """Leave bulk select mode and forget the selection."""
        self.selected.clear()
        self.active = False

    def toggle(self, ref: FoodRef) -> bool:
        """Flip a food in the selection; return True when it is now selected."""
        self._require_active()
        if ref in self.selected:
            self.selected.discard(ref)
            return False
        self.selected.add(ref)
        return True

    def select_all_visible(self, refs: Iterable[FoodRef]) -> None:
        """Add the given foods to the selection."""
        self._require_active()
        self.selected.update(refs)

    def clear(self) -> None:
        """Empty the selection without leaving bulk mode."""
        self.selected.clear()

    async def bulk_delete(self) -> BulkDeleteResult:
        """Delete every selected food, then save once.

        Foods that vanished since they were selected are skipped. Image
        cleanup failures do not stop the batch.
        """
        self._require_active()
        deleted: list[Food] = []
        missing: list[FoodRef] = []
        for ref in sorted(self.selected, key=lambda item: item.food_id):
            try:
                deleted.append(self.store.delete_food(ref.food_id, ref.locator))
            except NotFoundError:
                _logger.warning(
                    "Selected food no longer exists: food_id=%s", ref.food_id
                )
                missing.append(ref)
        self.selected.clear()
        for food in deleted:
            await self.images.discard(food.image_url)
        saved = False
        if deleted:
            saved = await self.persistence.save_and_report(self.store, self.notices)
        return BulkDeleteResult(deleted=deleted, missing=missing, saved=saved)

    def _require_active(self) -> None:
        if not self.active:
            raise ModeError("Bulk select mode is not active")

"""Tag-based visibility filtering."""

from collections.abc import Collection, Iterable
from dataclasses import dataclass, field

from diet_helper.domain.models import Food, FoodRef


def matches_tags(
    food_tag_ids: Collection[int], selected_tag_ids: Collection[int], match_any: bool
) -> bool:
    """Return True when a food's tags satisfy the selection.

    An empty selection matches everything. With ``match_any`` a single shared
    tag is enough; otherwise every selected tag must be present.
    """
    if not selected_tag_ids:
        return True
    food_tags = set(food_tag_ids)
    if match_any:
        return not food_tags.isdisjoint(selected_tag_ids)
    return food_tags.issuperset(selected_tag_ids)


def visible_foods(
    foods: Iterable[Food], selected_tag_ids: Collection[int], match_any: bool
) -> list[Food]:
    """Return the foods that pass the tag filter, keeping their order."""
    return [
        food
        for food in foods
        if matches_tags(food.tag_ids, selected_tag_ids, match_any)
    ]


@dataclass
class TagFilter:
    """The tag selection currently applied to the catalog view."""

    selected_tag_ids: set[int] = field(default_factory=set)
    match_any: bool = False
    name_query: str = ""

    def toggle(self, tag_id: int) -> bool:
        """Flip a tag in the selection; return True when it is now selected."""
        if tag_id in self.selected_tag_ids:
            self.selected_tag_ids.discard(tag_id)
            return False
        self.selected_tag_ids.add(tag_id)
        return True

    def discard(self, tag_id: int) -> None:
        """Drop a tag from the selection, e.g. after it was deleted."""
        self.selected_tag_ids.discard(tag_id)

    def clear(self) -> None:
        """Reset the selection and the name query."""
        self.selected_tag_ids.clear()
        self.name_query = ""

    def accepts(self, food: Food) -> bool:
        """Return True when a food is visible under this filter."""
        query = self.name_query.strip().lower()
        if query and query not in food.name.lower():
            return False
        return matches_tags(food.tag_ids, self.selected_tag_ids, self.match_any)

    def apply(
        self, entries: Iterable[tuple[FoodRef, Food]]
    ) -> list[tuple[FoodRef, Food]]:
        """Return the visible entries, keeping their order."""
        return [(ref, food) for ref, food in entries if self.accepts(food)]

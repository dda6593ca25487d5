"""Translate drag-and-drop outcomes into catalog mutations."""

from dataclasses import dataclass

from diet_helper.domain.errors import ValidationError
from diet_helper.domain.models import (
    LOOSE,
    CategoryLocator,
    Locator,
    SubgroupLocator,
)
from diet_helper.services.store import CatalogStore

ROOT_CONTAINER = "root"


@dataclass(frozen=True)
class DropOutcome:
    """Raw result of a drag-and-drop gesture."""

    source_container_id: str
    dest_container_id: str
    old_index: int
    new_index: int
    food_id: int


@dataclass(frozen=True)
class MoveTransition:
    """A food leaving one named container for another."""

    food_id: int
    food_name: str
    source: Locator
    dest: Locator
    source_label: str
    dest_label: str

    @property
    def message(self) -> str:
        """Return the user-facing description of the move."""
        return (
            f'Moved "{self.food_name}" from {self.source_label} to {self.dest_label}'
        )


@dataclass(frozen=True)
class MoveResult:
    """What a drop did to the catalog."""

    kind: str
    food_id: int
    transition: MoveTransition | None = None


def parse_container_id(container_id: str, store: CatalogStore) -> Locator:
    """Resolve ``category:<id>``, ``subgroup:<id>`` or ``root`` to a locator."""
    if container_id == ROOT_CONTAINER:
        return LOOSE
    kind, separator, raw_id = container_id.partition(":")
    if not separator or not raw_id.lstrip("-").isdigit():
        raise ValidationError([f"Malformed container id: {container_id}"])
    entity_id = int(raw_id)
    if kind == "category":
        store.get_category(entity_id)
        return CategoryLocator(entity_id)
    if kind == "subgroup":
        owner = store.find_subgroup_owner(entity_id)
        return SubgroupLocator(owner.id, entity_id)
    raise ValidationError([f"Unknown container kind: {kind}"])


@dataclass
class MoveResolver:
    """Turns a drop into exactly one reorder or move on the store."""

    store: CatalogStore

    def resolve(self, outcome: DropOutcome) -> MoveResult | None:
        """Apply a drop; return None when it changed nothing."""
        source = parse_container_id(outcome.source_container_id, self.store)
        dest = parse_container_id(outcome.dest_container_id, self.store)
        if source == dest:
            if outcome.old_index == outcome.new_index:
                return None
            foods = self.store.foods_at(source)
            if (
                0 <= outcome.old_index < len(foods)
                and foods[outcome.old_index].id != outcome.food_id
            ):
                raise ValidationError(
                    [f"Food {outcome.food_id} is not at position {outcome.old_index}"]
                )
            self.store.reorder(source, outcome.old_index, outcome.new_index)
            return MoveResult(kind="reorder", food_id=outcome.food_id)

        source_label = self.store.container_label(source)
        dest_label = self.store.container_label(dest)
        food = self.store.move_food(outcome.food_id, source, dest, outcome.new_index)
        return MoveResult(
            kind="move",
            food_id=food.id,
            transition=MoveTransition(
                food_id=food.id,
                food_name=food.name,
                source=source,
                dest=dest,
                source_label=source_label,
                dest_label=dest_label,
            ),
        )

"""Tests for the persisted catalog document format."""

import pytest

from diet_helper.domain.errors import PersistenceError
from diet_helper.domain.models import (
    Catalog,
    Category,
    Food,
    Nutrition,
    Subgroup,
    Tag,
)
from diet_helper.services.documents import catalog_from_document, catalog_to_document


def test_missing_document_loads_as_empty_catalog() -> None:
    assert catalog_from_document(None) == Catalog()


def test_old_documents_get_defaults() -> None:
    raw = {
        "foods": [{"id": 1, "name": "Apple"}],
        "categories": [
            {
                "id": 2,
                "name": "Fruit",
                "subgroups": [{"id": 3, "name": "Citrus", "foods": None}],
            }
        ],
    }

    catalog = catalog_from_document(raw)

    assert catalog.loose_foods == [Food(id=1, name="Apple")]
    assert catalog.tags == []
    assert catalog.categories[0].foods == []
    assert catalog.categories[0].subgroups == [Subgroup(id=3, name="Citrus")]


def test_null_fields_are_normalized() -> None:
    raw = {
        "foods": [
            {
                "id": 1,
                "name": "Apple",
                "imageUrl": None,
                "selected": None,
                "tags": None,
                "notes": None,
                "nutrition": None,
                "specificData": None,
            }
        ]
    }

    food = catalog_from_document(raw).loose_foods[0]

    assert food == Food(id=1, name="Apple")


def test_tag_ids_key_is_accepted_and_deduplicated() -> None:
    raw = {"foods": [{"id": 1, "name": "Apple", "tagIds": [7, 7, 8]}]}

    assert catalog_from_document(raw).loose_foods[0].tag_ids == [7, 8]


def test_invalid_shape_raises_persistence_error() -> None:
    with pytest.raises(PersistenceError):
        catalog_from_document({"foods": [{"name": "No id"}]})


def test_document_uses_persisted_key_names() -> None:
    catalog = Catalog(
        loose_foods=[
            Food(
                id=1,
                name="Apple",
                image_url="images/apple.png",
                tag_ids=[5],
                nutrition=Nutrition(protein=0.3),
                specific_data="Gala",
            )
        ],
        tags=[Tag(id=5, name="fruit")],
    )

    document = catalog_to_document(catalog)

    food = document["foods"][0]
    assert food["imageUrl"] == "images/apple.png"
    assert food["tags"] == [5]
    assert food["specificData"] == "Gala"
    assert food["nutrition"]["protein"] == 0.3
    assert food["nutrition"]["sodium"] is None
    assert document["tags"] == [{"id": 5, "name": "fruit"}]


def test_saved_document_loads_back_unchanged() -> None:
    catalog = Catalog(
        categories=[
            Category(
                id=2,
                name="Fruit",
                foods=[Food(id=3, name="Pear", notes="ripe")],
                subgroups=[
                    Subgroup(
                        id=4,
                        name="Citrus",
                        foods=[Food(id=6, name="Lime", tag_ids=[1])],
                    )
                ],
            )
        ],
        loose_foods=[Food(id=5, name="Water", nutrition=Nutrition(sodium=0.0))],
        tags=[Tag(id=1, name="sour")],
    )

    assert catalog_from_document(catalog_to_document(catalog)) == catalog

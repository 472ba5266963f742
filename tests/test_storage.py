"""Tests for persistence of the four collections."""

import json

import pytest

from fridge_forage.classifier import classify
from fridge_forage.recipes import create_recipe
from fridge_forage.shopping import StoreRegistry
from fridge_forage.storage import JsonFileStore, Kitchen, load_kitchen, save_kitchen


class MemoryStore:
    """In-memory key-value store."""

    def __init__(self, data: dict[str, str] | None = None):
        self.data = dict(data or {})

    def load(self, key: str) -> str:
        return self.data.get(key, "")

    def save(self, key: str, text: str) -> None:
        self.data[key] = text


@pytest.fixture
def kitchen(fridge, catalog, shopping_items):
    return Kitchen(
        ingredients=fridge,
        recipes=catalog,
        shopping=shopping_items,
        stores=StoreRegistry(["Emart", "Market"]),
    )


class TestKitchenPersistence:
    def test_save_then_load(self, kitchen):
        store = MemoryStore()
        save_kitchen(store, kitchen)

        assert set(store.data) == {"ingredients", "recipes", "shopping", "stores"}
        assert load_kitchen(store) == kitchen

    def test_empty_store_loads_empty_kitchen(self):
        assert load_kitchen(MemoryStore()) == Kitchen()

    def test_collections_default_independently(self, kitchen):
        store = MemoryStore()
        save_kitchen(store, kitchen)
        store.data["recipes"] = "{broken"
        store.data["stores"] = '{"not": "a list"}'

        loaded = load_kitchen(store)

        assert loaded.recipes == []
        assert loaded.stores.stores == []
        assert loaded.ingredients == kitchen.ingredients
        assert loaded.shopping == kitchen.shopping

    def test_malformed_entry_drops_collection(self):
        store = MemoryStore({"shopping": json.dumps([{"name": "no id"}])})
        assert load_kitchen(store).shopping == []

    def test_missing_store_label_defaults(self):
        store = MemoryStore({"shopping": json.dumps([{"id": "a", "name": "egg", "store": ""}])})
        assert load_kitchen(store).shopping[0].store == "unspecified"

    def test_unicode_kept_readable(self, kitchen):
        store = MemoryStore()
        save_kitchen(store, kitchen)
        assert "🥘" in store.data["recipes"]


class TestJsonFileStore:
    def test_missing_key(self, tmp_path):
        assert JsonFileStore(tmp_path).load("recipes") == ""

    def test_one_file_per_key(self, tmp_path, kitchen):
        store = JsonFileStore(tmp_path / "data")
        save_kitchen(store, kitchen)

        assert sorted(p.name for p in (tmp_path / "data").iterdir()) == [
            "ingredients.json",
            "recipes.json",
            "shopping.json",
            "stores.json",
        ]
        assert load_kitchen(store) == kitchen

    def test_invalid_utf8_file_loads_as_empty(self, tmp_path, kitchen):
        store = JsonFileStore(tmp_path)
        save_kitchen(store, kitchen)
        (tmp_path / "recipes.json").write_bytes(b"\xff\xfe\x80 not utf8")

        loaded = load_kitchen(store)

        assert loaded.recipes == []
        assert loaded.ingredients == kitchen.ingredients


class TestMalformedRecords:
    """Records with wrong types or broken invariants drop their collection."""

    def test_non_text_title(self):
        store = MemoryStore(
            {"recipes": json.dumps([{"id": "r1", "title": 123, "ingredients": ["egg"]}])}
        )
        recipes = load_kitchen(store).recipes
        assert recipes == []

        # the catalog stays usable afterwards
        recipes, _ = create_recipe(recipes, "Egg Rice", "egg")
        assert len(recipes) == 1

    def test_non_text_ingredient_name(self, catalog):
        store = MemoryStore(
            {
                "ingredients": json.dumps(
                    [{"id": "i1", "name": 5, "symbol": "", "purchase_date": "2026-10-01"}]
                )
            }
        )
        ingredients = load_kitchen(store).ingredients
        assert ingredients == []
        assert len(classify(catalog, ingredients, "all")) == len(catalog)

    def test_negative_price(self):
        store = MemoryStore(
            {"shopping": json.dumps([{"id": "s1", "name": "tofu", "price": -1500}])}
        )
        assert load_kitchen(store).shopping == []

    def test_blank_name(self):
        store = MemoryStore({"shopping": json.dumps([{"id": "s1", "name": " ", "price": 0}])})
        assert load_kitchen(store).shopping == []

    def test_requirements_cleaned_on_load(self):
        store = MemoryStore(
            {
                "recipes": json.dumps(
                    [{"id": "r1", "title": "Egg Rice", "ingredients": ["egg", " egg ", "", "rice"]}]
                )
            }
        )
        assert load_kitchen(store).recipes[0].ingredients == ["egg", "rice"]

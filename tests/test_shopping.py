"""Tests for the shopping module."""

import pytest

from fridge_forage.models import NotFoundError, ShoppingItem, ValidationError
from fridge_forage.shopping import (
    StoreRegistry,
    add_item,
    add_missing_items,
    grand_total,
    group_by_store,
    parse_price,
    remove_item,
    toggle_completed,
    update_item,
)


class TestParsePrice:
    """Tests for parse_price."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("3,500원", 3500),
            ("1500", 1500),
            ("$12.99", 1299),
            ("free", 0),
            ("", 0),
            (None, 0),
            ("-300", 300),
            (2500, 2500),
        ],
    )
    def test_parse(self, text, expected):
        assert parse_price(text) == expected


class TestGroupByStore:
    """Tests for group_by_store."""

    def test_groups_in_first_appearance_order(self, shopping_items):
        groups = group_by_store(shopping_items)
        assert list(groups) == ["Emart", "Market", "unspecified"]

    def test_group_totals(self, shopping_items):
        groups = group_by_store(shopping_items)
        assert groups["Emart"].total == 4400
        assert groups["Market"].total == 8000
        assert groups["unspecified"].total == 0

    def test_items_keep_relative_order(self, shopping_items):
        groups = group_by_store(shopping_items)
        assert [i.id for i in groups["Emart"].items] == ["s1", "s4"]

    def test_totals_add_up(self, shopping_items):
        groups = group_by_store(shopping_items)
        assert sum(g.total for g in groups.values()) == grand_total(shopping_items)

    def test_blank_store_goes_to_sentinel(self):
        items = [
            ShoppingItem(id="a", name="egg", store="", price=100),
            ShoppingItem(id="b", name="milk", store="   ", price=200),
        ]
        groups = group_by_store(items)
        assert list(groups) == ["unspecified"]
        assert groups["unspecified"].total == 300

    def test_no_empty_groups(self, shopping_items):
        groups = group_by_store(shopping_items)
        assert all(group.items for group in groups.values())
        assert set(groups) == {i.store for i in shopping_items}

    def test_empty_list(self):
        assert group_by_store([]) == {}

    def test_remaining(self, shopping_items):
        assert group_by_store(shopping_items)["Emart"].remaining == 1


class TestStoreRegistry:
    """Tests for StoreRegistry."""

    def test_register_appends(self):
        registry = StoreRegistry().register("Emart").register("Costco")
        assert registry.stores == ["Emart", "Costco"]

    def test_register_ignores_duplicates_and_sentinel(self):
        registry = StoreRegistry(["Emart"])
        assert registry.register("Emart") is registry
        assert registry.register("") is registry
        assert registry.register("unspecified") is registry

    def test_register_returns_new_registry(self):
        registry = StoreRegistry()
        updated = registry.register("Emart")
        assert registry.stores == []
        assert "Emart" in updated

    def test_suggest_prefix_first(self):
        registry = StoreRegistry(["Costco", "Emart", "Lotte Mart"])
        assert registry.suggest("em")[0] == "Emart"

    def test_suggest_tolerates_typos(self):
        registry = StoreRegistry(["Costco", "Emart"])
        assert "Emart" in registry.suggest("Emrat")

    def test_suggest_without_query_lists_stores(self):
        registry = StoreRegistry(["Costco", "Emart"])
        assert registry.suggest("") == ["Costco", "Emart"]


class TestMutations:
    """Tests for add/update/toggle/remove."""

    def test_add_item_front_and_registry(self, shopping_items):
        items, registry, item = add_item(shopping_items, StoreRegistry(), "eggs", "Costco", "6,900")
        assert items[0] is item
        assert item.price == 6900
        assert item.completed is False
        assert registry.stores == ["Costco"]

    def test_add_item_blank_store(self):
        _, registry, item = add_item([], StoreRegistry(), "eggs")
        assert item.store == "unspecified"
        assert registry.stores == []

    def test_add_item_requires_name(self):
        with pytest.raises(ValidationError):
            add_item([], StoreRegistry(), "  ")

    def test_update_resets_completed(self, shopping_items):
        items, _, edited = update_item(shopping_items, StoreRegistry(), "s4", "oat milk", "Emart", "3100")
        assert edited.id == "s4"
        assert edited.completed is False
        assert edited.price == 3100
        assert [i.id for i in items] == ["s1", "s2", "s3", "s4"]

    def test_toggle_completed(self, shopping_items):
        items, toggled = toggle_completed(shopping_items, "s1")
        assert toggled.completed is True
        assert shopping_items[0].completed is False

        _, toggled_back = toggle_completed(items, "s1")
        assert toggled_back.completed is False

    def test_remove(self, shopping_items):
        items = remove_item(shopping_items, "s2")
        assert [i.id for i in items] == ["s1", "s3", "s4"]
        assert len(shopping_items) == 4

    def test_remove_unknown(self, shopping_items):
        with pytest.raises(NotFoundError):
            remove_item(shopping_items, "nope")


class TestAddMissingItems:
    """Tests for add_missing_items."""

    def test_adds_missing_names(self):
        items, registry, added = add_missing_items([], StoreRegistry(), ["kimchi", "tofu"], "Emart")
        assert [i.name for i in added] == ["kimchi", "tofu"]
        assert [i.name for i in items] == ["tofu", "kimchi"]
        assert registry.stores == ["Emart"]

    def test_skips_items_already_pending(self, shopping_items):
        _, _, added = add_missing_items(shopping_items, StoreRegistry(), ["tofu", "carrot", "milk"])
        # milk is completed, so it is bought again
        assert [i.name for i in added] == ["milk"]

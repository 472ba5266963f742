"""Shopping list: price parsing, per-store grouping and the store registry."""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field, replace

from rapidfuzz import fuzz, process, utils

from .models import (
    UNSPECIFIED_STORE,
    NotFoundError,
    ShoppingItem,
    new_id,
    require_text,
)

# Minimum fuzzy score for a store suggestion
SUGGESTION_CUTOFF = 60


def parse_price(text: str | int | None) -> int:
    """
    Parse a price from arbitrary input by keeping only its digits.

    "3,500원" parses to 3500; input without digits ("free", "") parses to 0.
    """
    digits = re.sub(r"[^0-9]", "", str(text if text is not None else ""))
    return int(digits) if digits else 0


def normalize_store(store: str | None) -> str:
    """Return the trimmed store label, or the sentinel when blank."""
    return (store or "").strip() or UNSPECIFIED_STORE


@dataclass
class StoreGroup:
    """Shopping items bought at one store, with their running total."""

    store: str
    items: list[ShoppingItem] = field(default_factory=list)
    total: int = 0

    @property
    def remaining(self) -> int:
        """Number of items not yet bought."""
        return sum(1 for item in self.items if not item.completed)


def group_by_store(items: Iterable[ShoppingItem]) -> dict[str, StoreGroup]:
    """
    Partition items by store label.

    Groups appear in order of the first item for each store, items keep their
    relative order, and every group's total is the sum of its prices. Items
    without a store go to the "unspecified" group.
    """
    groups: dict[str, StoreGroup] = {}
    for item in items:
        store = normalize_store(item.store)
        if store not in groups:
            groups[store] = StoreGroup(store=store)
        groups[store].items.append(item)
        groups[store].total += item.price
    return groups


def grand_total(items: Iterable[ShoppingItem]) -> int:
    return sum(item.price for item in items)


@dataclass
class StoreRegistry:
    """Append-only record of every store label used, for suggestions."""

    stores: list[str] = field(default_factory=list)

    def __contains__(self, store: str) -> bool:
        return store in self.stores

    def register(self, store: str | None) -> "StoreRegistry":
        """Return a registry that includes the store; the sentinel is never recorded."""
        store = normalize_store(store)
        if store == UNSPECIFIED_STORE or store in self.stores:
            return self
        return StoreRegistry(stores=[*self.stores, store])

    def suggest(self, query: str = "", limit: int = 5) -> list[str]:
        """
        Suggest known stores for a partially typed label.

        Prefix matches (case-insensitive) come first, followed by fuzzy matches.
        """
        query = query.strip()
        if not query:
            return self.stores[:limit]

        lowered = query.lower()
        suggestions = [s for s in self.stores if s.lower().startswith(lowered)]
        fuzzy = process.extract(
            query,
            self.stores,
            scorer=fuzz.WRatio,
            processor=utils.default_process,
            limit=limit,
            score_cutoff=SUGGESTION_CUTOFF,
        )
        for store, _score, _index in fuzzy:
            if store not in suggestions:
                suggestions.append(store)
        return suggestions[:limit]


def create_item(name: str, store: str | None = None, price: str | int | None = None) -> ShoppingItem:
    """
    Build a validated shopping item with a fresh id.

    Raises:
        ValidationError: If the name is blank
    """
    return ShoppingItem(
        id=new_id(),
        name=require_text(name, "Item name"),
        store=normalize_store(store),
        price=parse_price(price),
    )


def add_item(
    items: list[ShoppingItem],
    registry: StoreRegistry,
    name: str,
    store: str | None = None,
    price: str | int | None = None,
) -> tuple[list[ShoppingItem], StoreRegistry, ShoppingItem]:
    """Add an item to the front of the list and record its store."""
    item = create_item(name, store, price)
    return [item, *items], registry.register(item.store), item


def add_missing_items(
    items: list[ShoppingItem],
    registry: StoreRegistry,
    names: Sequence[str],
    store: str | None = None,
) -> tuple[list[ShoppingItem], StoreRegistry, list[ShoppingItem]]:
    """
    Put a recipe's missing requirements on the list.

    Names already waiting on the list (not completed) are skipped.
    """
    pending = {item.name for item in items if not item.completed}
    added: list[ShoppingItem] = []
    for name in names:
        if name.strip() and name.strip() not in pending:
            added.append(create_item(name, store))
            pending.add(name.strip())
    for item in added:
        registry = registry.register(item.store)
    return [*reversed(added), *items], registry, added


def get_item(items: list[ShoppingItem], item_id: str) -> ShoppingItem:
    for item in items:
        if item.id == item_id:
            return item
    raise NotFoundError(f"Shopping item '{item_id}' not found")


def update_item(
    items: list[ShoppingItem],
    registry: StoreRegistry,
    item_id: str,
    name: str,
    store: str | None = None,
    price: str | int | None = None,
) -> tuple[list[ShoppingItem], StoreRegistry, ShoppingItem]:
    """
    Replace an item by id with a resubmitted one.

    A resubmitted item starts out not completed.
    """
    get_item(items, item_id)
    edited = replace(create_item(name, store, price), id=item_id)
    return (
        [edited if i.id == item_id else i for i in items],
        registry.register(edited.store),
        edited,
    )


def toggle_completed(
    items: list[ShoppingItem], item_id: str
) -> tuple[list[ShoppingItem], ShoppingItem]:
    """Flip an item's completed flag."""
    current = get_item(items, item_id)
    toggled = replace(current, completed=not current.completed)
    return [toggled if i.id == item_id else i for i in items], toggled


def remove_item(items: list[ShoppingItem], item_id: str) -> list[ShoppingItem]:
    """Return the list without the given item. The store registry is left untouched."""
    get_item(items, item_id)
    return [i for i in items if i.id != item_id]

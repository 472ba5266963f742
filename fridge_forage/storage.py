"""Persistence: four independently stored collections in a key-value store."""

import json
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Protocol, TypeVar

from .config import INGREDIENTS_KEY, RECIPES_KEY, SHOPPING_KEY, STORES_KEY
from .models import Ingredient, Recipe, ShoppingItem, ValidationError
from .shopping import StoreRegistry

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StorageError(Exception):
    """Exception raised when a collection cannot be written."""

    pass


class KeyValueStore(Protocol):
    """Loads and saves serialized text under stable keys."""

    def load(self, key: str) -> str: ...

    def save(self, key: str, text: str) -> None: ...


class JsonFileStore:
    """Key-value store keeping one JSON file per key in a directory."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def load(self, key: str) -> str:
        """Return the stored text, or an empty string when nothing is stored."""
        path = self._path(key)
        if not path.exists():
            return ""
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read %s: %s", path, e)
            return ""

    def save(self, key: str, text: str) -> None:
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Failed to save {key}: {e}") from e


@dataclass
class Kitchen:
    """The whole application state: what is owned, cooked and bought."""

    ingredients: list[Ingredient] = field(default_factory=list)
    recipes: list[Recipe] = field(default_factory=list)
    shopping: list[ShoppingItem] = field(default_factory=list)
    stores: StoreRegistry = field(default_factory=StoreRegistry)


def _load_list(store: KeyValueStore, key: str, parse: Callable[[Any], T]) -> list[T]:
    """Load one collection; absent or malformed data yields an empty list."""
    text = store.load(key)
    if not text.strip():
        return []
    try:
        data = json.loads(text)
        if not isinstance(data, list):
            raise TypeError(f"expected a list, got {type(data).__name__}")
        return [parse(entry) for entry in data]
    except (
        json.JSONDecodeError,
        KeyError,
        TypeError,
        ValueError,
        AttributeError,
        ValidationError,
    ) as e:
        logger.warning("Ignoring malformed '%s' data: %s", key, e)
        return []


def _parse_store_label(entry: Any) -> str:
    if not isinstance(entry, str):
        raise TypeError("store labels must be strings")
    return entry


def load_kitchen(store: KeyValueStore) -> Kitchen:
    """Load all four collections, defaulting each to empty independently."""
    return Kitchen(
        ingredients=_load_list(store, INGREDIENTS_KEY, Ingredient.from_dict),
        recipes=_load_list(store, RECIPES_KEY, Recipe.from_dict),
        shopping=_load_list(store, SHOPPING_KEY, ShoppingItem.from_dict),
        stores=StoreRegistry(stores=_load_list(store, STORES_KEY, _parse_store_label)),
    )


def _dump(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def save_kitchen(store: KeyValueStore, kitchen: Kitchen) -> None:
    """Save all four collections under their keys."""
    store.save(INGREDIENTS_KEY, _dump([i.to_dict() for i in kitchen.ingredients]))
    store.save(RECIPES_KEY, _dump([r.to_dict() for r in kitchen.recipes]))
    store.save(SHOPPING_KEY, _dump([s.to_dict() for s in kitchen.shopping]))
    store.save(STORES_KEY, _dump(list(kitchen.stores.stores)))

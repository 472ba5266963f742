"""Ingredient store: the owned food items and their storage sections."""

from dataclasses import replace
from datetime import date
from typing import Any

from .matcher import auto_symbol
from .models import (
    STORAGE_CATEGORIES,
    Ingredient,
    NotFoundError,
    StorageCategory,
    ValidationError,
    check_category,
    new_id,
    require_text,
)

_EDITABLE_FIELDS = {
    "name",
    "symbol",
    "quantity",
    "category",
    "purchase_date",
    "expiry_date",
    "label",
}


def create_ingredient(
    name: str,
    *,
    quantity: str = "",
    category: str = "refrigerated",
    purchase_date: date | None = None,
    expiry_date: date | None = None,
    label: str | None = None,
    symbol: str | None = None,
) -> Ingredient:
    """
    Build a validated ingredient with a fresh id.

    Raises:
        ValidationError: If the name is blank or the category is unknown
    """
    name = require_text(name, "Ingredient name")
    return Ingredient(
        id=new_id(),
        name=name,
        symbol=(symbol or "").strip() or auto_symbol(name),
        quantity=(quantity or "").strip(),
        category=check_category(category),
        purchase_date=purchase_date or date.today(),
        expiry_date=expiry_date,
        label=(label or "").strip() or None,
    )


def add_ingredient(
    ingredients: list[Ingredient], name: str, **kwargs: Any
) -> tuple[list[Ingredient], Ingredient]:
    """Create an ingredient and return a new store with it at the front."""
    ingredient = create_ingredient(name, **kwargs)
    return [ingredient, *ingredients], ingredient


def get_ingredient(ingredients: list[Ingredient], ingredient_id: str) -> Ingredient:
    for ingredient in ingredients:
        if ingredient.id == ingredient_id:
            return ingredient
    raise NotFoundError(f"Ingredient '{ingredient_id}' not found")


def update_ingredient(
    ingredients: list[Ingredient], ingredient_id: str, **changes: Any
) -> tuple[list[Ingredient], Ingredient]:
    """
    Replace an ingredient by id with an edited copy.

    Args:
        ingredients: Current ingredient store
        ingredient_id: Id of the ingredient to edit
        **changes: Fields to overwrite (name, symbol, quantity, category,
            purchase_date, expiry_date, label)

    Returns:
        Tuple of (new ingredient store, edited ingredient)

    Raises:
        NotFoundError: If the id is unknown
        ValidationError: If a change is invalid
    """
    unknown = set(changes) - _EDITABLE_FIELDS
    if unknown:
        raise ValidationError(f"Cannot edit ingredient field(s): {', '.join(sorted(unknown))}")

    current = get_ingredient(ingredients, ingredient_id)
    if "name" in changes:
        changes["name"] = require_text(changes["name"], "Ingredient name")
    if "category" in changes:
        changes["category"] = check_category(changes["category"])
    if "label" in changes:
        changes["label"] = (changes["label"] or "").strip() or None
    if "symbol" in changes and not (changes["symbol"] or "").strip():
        changes["symbol"] = auto_symbol(changes.get("name", current.name))

    edited = replace(current, **changes)
    return [edited if i.id == ingredient_id else i for i in ingredients], edited


def remove_ingredient(ingredients: list[Ingredient], ingredient_id: str) -> list[Ingredient]:
    """Return the store without the given ingredient."""
    get_ingredient(ingredients, ingredient_id)
    return [i for i in ingredients if i.id != ingredient_id]


def group_by_category(
    ingredients: list[Ingredient],
) -> dict[StorageCategory, list[Ingredient]]:
    """Split ingredients into storage sections; every section is present, possibly empty."""
    sections: dict[StorageCategory, list[Ingredient]] = {c: [] for c in STORAGE_CATEGORIES}
    for ingredient in ingredients:
        sections[ingredient.category].append(ingredient)
    return sections


def expired_ingredients(ingredients: list[Ingredient], today: date | None = None) -> list[Ingredient]:
    """Return ingredients whose expiry date has passed."""
    today = today or date.today()
    return [i for i in ingredients if i.is_expired(today)]

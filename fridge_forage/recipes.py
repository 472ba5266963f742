"""Recipe catalog: creation, editing, duplicate detection and status toggles."""

import random
from collections.abc import Iterable
from dataclasses import replace
from typing import Any
from urllib.parse import quote_plus

from .matcher import DEFAULT_DISH_SYMBOL, random_recipe_symbol
from .models import (
    NotFoundError,
    Recipe,
    RecipeStatus,
    ValidationError,
    check_status,
    new_id,
    normalize_requirements,
    require_text,
)

SEARCH_URL = "https://www.google.com/search?q="

_EDITABLE_FIELDS = {"title", "ingredients", "url", "status", "symbol"}


class DuplicateRecipeError(Exception):
    """Raised when a recipe with the same title and requirement set already exists."""

    def __init__(self, existing: Recipe):
        self.existing = existing
        super().__init__(
            f"A recipe named '{existing.title}' with the same ingredients already exists"
        )


def find_duplicate(
    recipes: Iterable[Recipe],
    title: str,
    ingredients: list[str],
    exclude_id: str | None = None,
) -> Recipe | None:
    """
    Find a recipe sharing the trimmed title and the requirement set.

    Requirement order does not matter. The recipe with ``exclude_id`` (the one
    being edited) is ignored.
    """
    title = title.strip()
    wanted = sorted(ingredients)
    for recipe in recipes:
        if exclude_id is not None and recipe.id == exclude_id:
            continue
        if recipe.title.strip() == title and sorted(recipe.ingredients) == wanted:
            return recipe
    return None


def choose_symbol(
    symbol: str | None, ingredients: list[str], rng: random.Random | None = None
) -> str:
    """Keep an explicit symbol; replace a blank or default one with a random pick."""
    symbol = (symbol or "").strip()
    if not symbol or symbol == DEFAULT_DISH_SYMBOL:
        return random_recipe_symbol(ingredients, rng)
    return symbol


def create_recipe(
    recipes: list[Recipe],
    title: str,
    ingredients: str | Iterable[str],
    *,
    url: str | None = None,
    status: str = "none",
    symbol: str | None = None,
    rng: random.Random | None = None,
) -> tuple[list[Recipe], Recipe]:
    """
    Validate a new recipe and insert it at the front of the catalog.

    Raises:
        ValidationError: If the title is blank or the status is unknown
        DuplicateRecipeError: If the same title and requirement set exist
    """
    title = require_text(title, "Recipe title")
    requirements = normalize_requirements(ingredients)
    status = check_status(status)

    duplicate = find_duplicate(recipes, title, requirements)
    if duplicate:
        raise DuplicateRecipeError(duplicate)

    recipe = Recipe(
        id=new_id(),
        title=title,
        ingredients=requirements,
        url=(url or "").strip() or None,
        status=status,
        symbol=choose_symbol(symbol, requirements, rng),
    )
    return [recipe, *recipes], recipe


def get_recipe(recipes: list[Recipe], recipe_id: str) -> Recipe:
    for recipe in recipes:
        if recipe.id == recipe_id:
            return recipe
    raise NotFoundError(f"Recipe '{recipe_id}' not found")


def update_recipe(
    recipes: list[Recipe],
    recipe_id: str,
    *,
    rng: random.Random | None = None,
    **changes: Any,
) -> tuple[list[Recipe], Recipe]:
    """
    Replace a recipe by id with an edited copy.

    The edited recipe goes through the same validation and duplicate check
    as a new one, ignoring itself.

    Raises:
        NotFoundError: If the id is unknown
        ValidationError: If a change is invalid
        DuplicateRecipeError: If the edit collides with another recipe
    """
    unknown = set(changes) - _EDITABLE_FIELDS
    if unknown:
        raise ValidationError(f"Cannot edit recipe field(s): {', '.join(sorted(unknown))}")

    current = get_recipe(recipes, recipe_id)
    if "title" in changes:
        changes["title"] = require_text(changes["title"], "Recipe title")
    if "ingredients" in changes:
        changes["ingredients"] = normalize_requirements(changes["ingredients"])
    if "status" in changes:
        changes["status"] = check_status(changes["status"])
    if "url" in changes:
        changes["url"] = (changes["url"] or "").strip() or None

    edited = replace(current, **changes)
    if "symbol" in changes:
        edited.symbol = choose_symbol(changes["symbol"], edited.ingredients, rng)

    duplicate = find_duplicate(recipes, edited.title, edited.ingredients, exclude_id=recipe_id)
    if duplicate:
        raise DuplicateRecipeError(duplicate)

    return [edited if r.id == recipe_id else r for r in recipes], edited


def remove_recipe(recipes: list[Recipe], recipe_id: str) -> list[Recipe]:
    """Return the catalog without the given recipe."""
    get_recipe(recipes, recipe_id)
    return [r for r in recipes if r.id != recipe_id]


def toggle_status(
    recipes: list[Recipe], recipe_id: str, status: RecipeStatus
) -> tuple[list[Recipe], Recipe]:
    """
    Toggle a recipe's status flag.

    Setting the status the recipe already has clears it back to "none".
    """
    status = check_status(status)
    current = get_recipe(recipes, recipe_id)
    toggled = replace(current, status="none" if current.status == status else status)
    return [toggled if r.id == recipe_id else r for r in recipes], toggled


def recipe_link(recipe: Recipe) -> str:
    """Return the recipe's reference URL, or a web search for it."""
    if recipe.url:
        return recipe.url
    return SEARCH_URL + quote_plus(f"{recipe.title} recipe")

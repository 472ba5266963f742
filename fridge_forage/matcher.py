"""Requirement matching against owned ingredients, plus display symbols."""

import random
from collections.abc import Iterable, Sequence

from .models import Ingredient

# Keyword -> symbol. Checked in order; the first keyword contained in a name wins.
SYMBOL_TABLE: dict[str, str] = {
    "egg": "🥚",
    "milk": "🥛",
    "meat": "🥩",
    "radish": "🥙",
    "carrot": "🥕",
    "onion": "🧅",
    "mushroom": "🍄",
    "scallion": "🌿",
    "garlic": "🧄",
    "tofu": "⬜",
    "sprout": "🌱",
    "kimchi": "🌶️",
    "water": "💧",
    "apple": "🍎",
    "bread": "🍞",
    "cheese": "🧀",
    "ham": "🥓",
    "fish": "🐟",
}

# Generic dish palette used when no requirement maps to a known symbol
DISH_SYMBOLS: tuple[str, ...] = (
    "🥘",
    "🍛",
    "🥗",
    "🍝",
    "🍜",
    "🍲",
    "🍱",
    "🍖",
    "🍗",
    "🥪",
    "🍕",
    "🍔",
)

DEFAULT_INGREDIENT_SYMBOL = "📦"
DEFAULT_DISH_SYMBOL = DISH_SYMBOLS[0]


def is_satisfied(requirement: str, ingredients: Iterable[Ingredient]) -> bool:
    """
    Check whether any owned ingredient satisfies a requirement.

    A requirement is satisfied when it appears as an exact, case-sensitive
    substring of an owned ingredient's name. "onion" is satisfied by
    "spring onion, 3 stalks"; "Onion" is not.
    """
    return any(requirement in ingredient.name for ingredient in ingredients)


def missing_requirements(
    requirements: Iterable[str], ingredients: Sequence[Ingredient]
) -> list[str]:
    """Return the requirements no owned ingredient satisfies, in their original order."""
    return [r for r in requirements if not is_satisfied(r, ingredients)]


def find_owned_ingredient(
    requirement: str, ingredients: Iterable[Ingredient]
) -> Ingredient | None:
    """Return the first owned ingredient satisfying the requirement, if any."""
    for ingredient in ingredients:
        if requirement in ingredient.name:
            return ingredient
    return None


def _lookup_symbol(name: str) -> str | None:
    for keyword, symbol in SYMBOL_TABLE.items():
        if keyword in name:
            return symbol
    return None


def auto_symbol(name: str) -> str:
    """Pick a symbol for an ingredient name, falling back to a generic package."""
    return _lookup_symbol(name) or DEFAULT_INGREDIENT_SYMBOL


def random_recipe_symbol(requirements: Iterable[str], rng: random.Random | None = None) -> str:
    """
    Pick a display symbol for a recipe.

    If any requirement maps to a known symbol, one of those matches is chosen
    at random (a symbol matched by several requirements is proportionally
    more likely). Otherwise a generic dish symbol is chosen uniformly.

    Args:
        requirements: The recipe's requirement names
        rng: Randomness source; pass a seeded instance for reproducible picks

    Returns:
        A single symbol string
    """
    rng = rng or random.Random()
    found = [s for s in (_lookup_symbol(r) for r in requirements) if s]
    if found:
        return rng.choice(found)
    return rng.choice(DISH_SYMBOLS)

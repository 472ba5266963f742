"""Fridge Forage - cook from what you have, shop for what you don't."""

__version__ = "1.0.0"

from .classifier import RecipeMatch, classify
from .matcher import is_satisfied, missing_requirements
from .models import Ingredient, Recipe, ShoppingItem
from .recipes import DuplicateRecipeError, create_recipe
from .shopping import StoreGroup, group_by_store, parse_price
from .suggestions import accept_suggestion, discover_recipe, estimate_expiry

__all__ = [
    "Ingredient",
    "Recipe",
    "ShoppingItem",
    "is_satisfied",
    "missing_requirements",
    "classify",
    "RecipeMatch",
    "create_recipe",
    "DuplicateRecipeError",
    "group_by_store",
    "StoreGroup",
    "parse_price",
    "estimate_expiry",
    "discover_recipe",
    "accept_suggestion",
]

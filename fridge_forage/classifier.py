"""Recipe classification: bucket recipes by what can be cooked right now."""

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Literal

from .matcher import missing_requirements
from .models import Ingredient, Recipe

RecipeFilter = Literal["ready", "almost", "always", "want", "all"]

RECIPE_FILTERS: tuple[RecipeFilter, ...] = ("ready", "almost", "always", "want", "all")

# Upper bound on missing requirements for the "almost" bucket
ALMOST_MAX_MISSING = 2


@dataclass
class RecipeMatch:
    """A recipe together with the requirements the ingredient store lacks."""

    recipe: Recipe
    missing: list[str] = field(default_factory=list)

    @property
    def missing_count(self) -> int:
        return len(self.missing)

    @property
    def is_ready(self) -> bool:
        return not self.missing


def _in_bucket(match: RecipeMatch, recipe_filter: RecipeFilter) -> bool:
    status = match.recipe.status
    if recipe_filter == "ready":
        return match.missing_count == 0 and status == "none"
    if recipe_filter == "almost":
        return 0 < match.missing_count <= ALMOST_MAX_MISSING and status == "none"
    if recipe_filter == "always":
        return status == "always"
    if recipe_filter == "want":
        return status == "want"
    return True


def match_recipes(recipes: Sequence[Recipe], ingredients: Sequence[Ingredient]) -> list[RecipeMatch]:
    """Compute the missing requirements of every recipe, keeping catalog order."""
    return [RecipeMatch(r, missing_requirements(r.ingredients, ingredients)) for r in recipes]


def classify(
    recipes: Sequence[Recipe],
    ingredients: Sequence[Ingredient],
    recipe_filter: RecipeFilter | None,
) -> list[RecipeMatch]:
    """
    Filter recipes into a bucket and rank them by missing requirements.

    Buckets:
        ready:  nothing missing, no status flag
        almost: one or two missing, no status flag
        always: flagged "always", however much is missing
        want:   flagged "want", however much is missing
        all:    every recipe

    Without a filter the result is empty. The result is sorted ascending by
    missing count; the sort is stable so ties keep catalog order. Inputs are
    never modified.

    Raises:
        ValueError: If the filter name is unknown
    """
    if recipe_filter is None:
        return []
    if recipe_filter not in RECIPE_FILTERS:
        raise ValueError(f"Unknown recipe filter: {recipe_filter}")

    matches = [m for m in match_recipes(recipes, ingredients) if _in_bucket(m, recipe_filter)]
    return sorted(matches, key=lambda m: m.missing_count)


def count_buckets(
    recipes: Sequence[Recipe], ingredients: Sequence[Ingredient]
) -> dict[RecipeFilter, int]:
    """Return how many recipes fall into each bucket."""
    matches = match_recipes(recipes, ingredients)
    return {f: sum(1 for m in matches if _in_bucket(m, f)) for f in RECIPE_FILTERS}

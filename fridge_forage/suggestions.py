"""AI suggestions: expiry estimates and recipe discovery.

The text service is treated as a black box that turns a prompt into free-form
text. This module builds the prompts, validates what comes back, and merges an
accepted recipe suggestion into the catalog.

Workflow:
    1. expiry = estimate_expiry(generator, "milk", "refrigerated", purchased)
    2. provisional = discover_recipe(generator, ["egg", "rice"], rng=rng)
    3. recipes, accepted = accept_suggestion(recipes, provisional, "want")
"""

import json
import logging
import random
import re
from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from datetime import date

from .gate import RequestGate
from .llm import TextGenerator
from .matcher import random_recipe_symbol
from .models import (
    PROVISIONAL_ID_PREFIX,
    Recipe,
    RecipeStatus,
    ValidationError,
    check_status,
    new_id,
    normalize_requirements,
    require_text,
)
from .recipes import DuplicateRecipeError, find_duplicate

logger = logging.getLogger(__name__)

INVALID_TOKEN = "INVALID"
DATE_PATTERN = re.compile(r"\d{4}-\d{2}-\d{2}")
CODE_FENCE_PATTERN = re.compile(r"```(?:json)?")


class SuggestionError(Exception):
    """Base exception for AI suggestion failures."""

    pass


class InvalidFoodNameError(SuggestionError):
    """The text service did not recognize the food name."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"'{name}' doesn't look like a food name. Please check it and try again.")


class SuggestionParseError(SuggestionError):
    """The text service answered with something that is not a usable recipe."""

    pass


@dataclass
class RecipeSuggestion:
    """A recipe as proposed by the text service, before any identity is assigned."""

    title: str
    ingredients: list[str] = field(default_factory=list)


# =============================================================================
# EXPIRY ESTIMATION
# =============================================================================


def build_expiry_prompt(name: str, category: str, purchase_date: date) -> str:
    return (
        f"Food: {name}, storage: {category}, purchased: {purchase_date.isoformat()}. "
        "Reply with exactly one estimated expiry date in YYYY-MM-DD format. "
        f"If the food name is a meaningless string or an unknown word, reply with only "
        f"'{INVALID_TOKEN}'."
    )


def parse_expiry_response(text: str, name: str = "") -> date | None:
    """
    Extract the estimated expiry date from a response.

    Returns:
        The first YYYY-MM-DD date in the text, or None when there is none
        (or it is not a real calendar date)

    Raises:
        InvalidFoodNameError: If the response contains the INVALID token
    """
    text = (text or "").strip()
    if INVALID_TOKEN in text:
        raise InvalidFoodNameError(name)

    found = DATE_PATTERN.search(text)
    if not found:
        logger.info("No date in expiry response: %r", text[:100])
        return None
    try:
        return date.fromisoformat(found.group(0))
    except ValueError:
        logger.info("Ignoring impossible date %s in expiry response", found.group(0))
        return None


def estimate_expiry(
    generator: TextGenerator,
    name: str,
    category: str,
    purchase_date: date | None,
    gate: RequestGate | None = None,
) -> date | None:
    """
    Ask the text service for an expiry date.

    Nothing is retried automatically; on InvalidFoodNameError the user should
    correct the name and ask again.

    Raises:
        ValidationError: If the name or purchase date is missing
        InvalidFoodNameError: If the service rejects the name
        LLMError: If the service call fails
    """
    name = require_text(name, "Ingredient name")
    if purchase_date is None:
        raise ValidationError("Purchase date is required")

    prompt = build_expiry_prompt(name, category, purchase_date)
    if gate is None:
        return parse_expiry_response(generator.generate(prompt), name)
    with gate.hold("expiry"):
        return parse_expiry_response(generator.generate(prompt), name)


# =============================================================================
# RECIPE DISCOVERY
# =============================================================================


def build_discovery_prompt(names: Sequence[str]) -> str:
    return (
        f"Suggest one very simple dish that uses {', '.join(names)} as its main ingredients. "
        "Never put quantities or units (like '2 eggs' or '50ml') in ingredient names; "
        "write only the bare ingredient name. "
        'Answer in JSON: {"title": "dish name", "ingredients": ["egg", "onion", "soy sauce"]}'
    )


def strip_code_fences(text: str) -> str:
    """Remove markdown code fence markers around a payload."""
    return CODE_FENCE_PATTERN.sub("", text or "").strip()


def parse_recipe_response(text: str) -> RecipeSuggestion:
    """
    Parse a recipe suggestion from a response.

    Raises:
        SuggestionParseError: If the payload is not JSON, or lacks a title or an
            ingredients list
    """
    try:
        data = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        logger.warning("Failed to parse recipe suggestion as JSON: %s", e)
        raise SuggestionParseError("The suggestion could not be read. Please try again.") from e

    if not isinstance(data, dict):
        raise SuggestionParseError("The suggestion is not a recipe object")

    title = data.get("title")
    if not isinstance(title, str) or not title.strip():
        raise SuggestionParseError("The suggestion has no title")

    raw_ingredients = data.get("ingredients")
    if not isinstance(raw_ingredients, list) or not all(
        isinstance(i, str) for i in raw_ingredients
    ):
        raise SuggestionParseError("The suggestion has no ingredient list")

    ingredients = normalize_requirements(raw_ingredients)
    if not ingredients:
        raise SuggestionParseError("The suggestion has no ingredients")

    return RecipeSuggestion(title=title.strip(), ingredients=ingredients)


def build_provisional_recipe(
    suggestion: RecipeSuggestion, rng: random.Random | None = None
) -> Recipe:
    """Wrap a suggestion in a provisional recipe held outside the catalog."""
    return Recipe(
        id=PROVISIONAL_ID_PREFIX + new_id(),
        title=suggestion.title,
        ingredients=list(suggestion.ingredients),
        status="none",
        symbol=random_recipe_symbol(suggestion.ingredients, rng),
    )


def discover_recipe(
    generator: TextGenerator,
    names: Sequence[str],
    rng: random.Random | None = None,
    gate: RequestGate | None = None,
) -> Recipe:
    """
    Ask the text service for a recipe built around the selected ingredients.

    Returns:
        A provisional recipe; it is not part of the catalog until accepted

    Raises:
        ValidationError: If no ingredient is selected
        SuggestionParseError: If the response is not a usable recipe
        LLMError: If the service call fails
    """
    selected = normalize_requirements(names)
    if not selected:
        raise ValidationError("Select at least one ingredient")

    prompt = build_discovery_prompt(selected)
    if gate is None:
        suggestion = parse_recipe_response(generator.generate(prompt))
    else:
        with gate.hold("discovery"):
            suggestion = parse_recipe_response(generator.generate(prompt))

    recipe = build_provisional_recipe(suggestion, rng)
    logger.info("Suggested '%s' for %s", recipe.title, ", ".join(selected))
    return recipe


def accept_suggestion(
    recipes: list[Recipe], provisional: Recipe, status: RecipeStatus
) -> tuple[list[Recipe], Recipe]:
    """
    Accept a provisional recipe into the catalog.

    The recipe gets a permanent id and the chosen status, and is inserted at
    the front of the catalog.

    Raises:
        ValidationError: If the status is unknown
        DuplicateRecipeError: If the catalog already has the same title and
            requirement set
    """
    status = check_status(status)
    duplicate = find_duplicate(recipes, provisional.title, provisional.ingredients)
    if duplicate:
        raise DuplicateRecipeError(duplicate)

    accepted = replace(
        provisional,
        id=new_id(),
        title=provisional.title.strip(),
        ingredients=list(provisional.ingredients),
        status=status,
    )
    return [accepted, *recipes], accepted

"""CLI entry point for Fridge Forage."""

import logging
import random
from collections.abc import Sequence
from datetime import date, datetime
from typing import NoReturn

import click

from .classifier import RECIPE_FILTERS, RecipeMatch, classify, count_buckets
from .config import DATA_DIR, clear_api_key, save_api_key
from .export import export_shopping_list, format_price
from .gate import GateBusyError, RequestGate
from .inventory import (
    add_ingredient,
    group_by_category,
    remove_ingredient,
    update_ingredient,
)
from .llm import GeminiClient, LLMError, TextGenerator
from .matcher import find_owned_ingredient, missing_requirements
from .models import (
    RECIPE_STATUSES,
    STORAGE_CATEGORIES,
    NotFoundError,
    ValidationError,
    normalize_requirements,
)
from .recipes import (
    DuplicateRecipeError,
    create_recipe,
    get_recipe,
    recipe_link,
    remove_recipe,
    toggle_status,
    update_recipe,
)
from .review_tui import interactive_review, simple_review_prompt
from .shopping import (
    add_item,
    add_missing_items,
    get_item,
    grand_total,
    group_by_store,
    remove_item,
    toggle_completed,
    update_item,
)
from .storage import JsonFileStore, Kitchen, StorageError, load_kitchen, save_kitchen
from .suggestions import SuggestionError, accept_suggestion, discover_recipe, estimate_expiry

# Errors that mean "the requested action did not happen, try again"
USER_ERRORS = (
    ValidationError,
    NotFoundError,
    DuplicateRecipeError,
    SuggestionError,
    LLMError,
    GateBusyError,
    StorageError,
)

SHORT_ID = 8
DATE_TYPE = click.DateTime(formats=["%Y-%m-%d"])

# Shared AI client and gate
_generator: TextGenerator | None = None
_gate = RequestGate()


def get_generator() -> TextGenerator:
    """Get or create the text generator."""
    global _generator
    if _generator is None:
        _generator = GeminiClient()
    return _generator


def load() -> Kitchen:
    return load_kitchen(JsonFileStore(DATA_DIR))


def save(kitchen: Kitchen) -> None:
    save_kitchen(JsonFileStore(DATA_DIR), kitchen)


def fail(message: str) -> NoReturn:
    click.echo(f"✗ {message}", err=True)
    raise SystemExit(1)


def resolve_id(entities: Sequence, prefix: str, kind: str) -> str:
    """Expand an abbreviated id to the full id of exactly one entity."""
    matches = [e.id for e in entities if e.id.startswith(prefix)]
    if not matches:
        fail(f"No {kind} with id '{prefix}'")
    if len(matches) > 1:
        fail(f"Id '{prefix}' matches {len(matches)} {kind}s; use more characters")
    return matches[0]


def _to_date(value: datetime | None) -> date | None:
    return value.date() if value else None


def display_recipe_matches(matches: list[RecipeMatch]) -> None:
    """Display classified recipes with their owned and missing requirements."""
    for match in matches:
        recipe = match.recipe
        flag = {"always": " 🌟", "want": " 💡"}.get(recipe.status, "")
        click.echo(f"\n{recipe.symbol} {recipe.title}{flag}  [{recipe.id[:SHORT_ID]}]")
        parts = []
        for name in recipe.ingredients:
            parts.append(f"✗ {name}" if name in match.missing else f"✓ {name}")
        if parts:
            click.echo("   " + "  ".join(parts))
        if match.missing:
            click.echo(f"   Missing: {len(match.missing)}")


# ============================================================================
# Main CLI Group
# ============================================================================


@click.group()
@click.version_option(version="1.0.0", prog_name="fridge-forage")
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
def cli(verbose: bool):
    """Fridge Forage: cook from what you have.

    Track the food in your fridge, find recipes you can make right now,
    and keep a shopping list grouped by store.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


# ============================================================================
# Ingredient Commands
# ============================================================================


@cli.group()
def items():
    """Manage the food you have at home."""
    pass


@items.command("list")
@click.option("--category", "-c", type=click.Choice(STORAGE_CATEGORIES), help="Only one section")
def items_list(category: str | None):
    """List ingredients by storage section."""
    kitchen = load()
    today = date.today()

    for section, section_items in group_by_category(kitchen.ingredients).items():
        if category and section != category:
            continue
        click.echo()
        click.echo(f"{section.upper()} ({len(section_items)})")
        click.echo("-" * 50)
        if not section_items:
            click.echo("  (empty)")
        for ing in section_items:
            label = f" [{ing.label}]" if ing.label else ""
            expiry = ""
            if ing.expiry_date:
                marker = "🚨" if ing.is_expired(today) else "⌛"
                expiry = f"  {marker} {ing.expiry_date.isoformat()}"
            quantity = f"  {ing.quantity}" if ing.quantity else ""
            click.echo(f"  {ing.symbol} {ing.name}{label}{quantity}{expiry}  [{ing.id[:SHORT_ID]}]")
    click.echo()


@items.command("add")
@click.argument("name")
@click.option("--quantity", "-q", default="", help="Free-text quantity, e.g. '3 stalks'")
@click.option(
    "--category", "-c", type=click.Choice(STORAGE_CATEGORIES), default="refrigerated"
)
@click.option("--purchased", "-p", type=DATE_TYPE, help="Purchase date (default: today)")
@click.option("--expires", "-e", type=DATE_TYPE, help="Expiry date")
@click.option("--label", "-l", help="Short label")
@click.option("--symbol", help="Display symbol (default: picked from the name)")
@click.option("--ai-expiry", is_flag=True, help="Ask the AI to estimate the expiry date")
def items_add(
    name: str,
    quantity: str,
    category: str,
    purchased: datetime | None,
    expires: datetime | None,
    label: str | None,
    symbol: str | None,
    ai_expiry: bool,
):
    """Add an ingredient.

    Examples:

        fridge items add "spring onion" -q "3 stalks"

        fridge items add milk -c refrigerated --ai-expiry
    """
    kitchen = load()
    purchase_date = _to_date(purchased) or date.today()
    expiry_date = _to_date(expires)

    try:
        if ai_expiry and expiry_date is None:
            click.echo("Estimating expiry date...")
            expiry_date = estimate_expiry(
                get_generator(), name, category, purchase_date, gate=_gate
            )
            if expiry_date:
                click.echo(f"  Estimated expiry: {expiry_date.isoformat()}")
            else:
                click.echo("  No expiry date suggested")

        kitchen.ingredients, ingredient = add_ingredient(
            kitchen.ingredients,
            name,
            quantity=quantity,
            category=category,
            purchase_date=purchase_date,
            expiry_date=expiry_date,
            label=label,
            symbol=symbol,
        )
        save(kitchen)
    except USER_ERRORS as e:
        fail(str(e))

    click.echo(f"✓ Added {ingredient.symbol} {ingredient.name} [{ingredient.id[:SHORT_ID]}]")


@items.command("edit")
@click.argument("item_id")
@click.option("--name", "-n", help="New name")
@click.option("--quantity", "-q", help="New quantity")
@click.option("--category", "-c", type=click.Choice(STORAGE_CATEGORIES))
@click.option("--purchased", "-p", type=DATE_TYPE, help="New purchase date")
@click.option("--expires", "-e", type=DATE_TYPE, help="New expiry date")
@click.option("--clear-expiry", is_flag=True, help="Remove the expiry date")
@click.option("--label", "-l", help="New label (empty string to clear)")
@click.option("--symbol", help="New symbol (empty string to pick from the name)")
def items_edit(
    item_id: str,
    name: str | None,
    quantity: str | None,
    category: str | None,
    purchased: datetime | None,
    expires: datetime | None,
    clear_expiry: bool,
    label: str | None,
    symbol: str | None,
):
    """Edit an ingredient."""
    kitchen = load()
    full_id = resolve_id(kitchen.ingredients, item_id, "ingredient")

    changes: dict = {}
    for field_name, value in (
        ("name", name),
        ("quantity", quantity),
        ("category", category),
        ("label", label),
        ("symbol", symbol),
    ):
        if value is not None:
            changes[field_name] = value
    if purchased:
        changes["purchase_date"] = purchased.date()
    if expires:
        changes["expiry_date"] = expires.date()
    elif clear_expiry:
        changes["expiry_date"] = None

    if not changes:
        click.echo("Nothing to change.")
        return

    try:
        kitchen.ingredients, ingredient = update_ingredient(
            kitchen.ingredients, full_id, **changes
        )
        save(kitchen)
    except USER_ERRORS as e:
        fail(str(e))

    click.echo(f"✓ Updated {ingredient.symbol} {ingredient.name}")


@items.command("remove")
@click.argument("item_id")
def items_remove(item_id: str):
    """Remove an ingredient (used up or thrown away)."""
    kitchen = load()
    full_id = resolve_id(kitchen.ingredients, item_id, "ingredient")
    try:
        kitchen.ingredients = remove_ingredient(kitchen.ingredients, full_id)
        save(kitchen)
    except USER_ERRORS as e:
        fail(str(e))
    click.echo("✓ Removed ingredient")


@items.command("find")
@click.argument("requirement")
def items_find(requirement: str):
    """Show which owned ingredient satisfies a recipe requirement."""
    kitchen = load()
    ingredient = find_owned_ingredient(requirement, kitchen.ingredients)
    if ingredient is None:
        click.echo(f"✗ Nothing in your fridge matches '{requirement}'")
        raise SystemExit(1)
    click.echo(
        f"✓ {ingredient.symbol} {ingredient.name} ({ingredient.category}) "
        f"[{ingredient.id[:SHORT_ID]}]"
    )


# ============================================================================
# Recipe Commands
# ============================================================================


@cli.group()
def recipes():
    """Manage recipes and see what you can cook."""
    pass


@recipes.command("list")
@click.option(
    "--filter", "-f", "recipe_filter", type=click.Choice(RECIPE_FILTERS), help="Recipe bucket"
)
def recipes_list(recipe_filter: str | None):
    """List recipes in a bucket, fewest missing ingredients first.

    Buckets: ready (nothing missing), almost (1-2 missing), always,
    want, all. Without --filter a summary of every bucket is shown.
    """
    kitchen = load()

    if recipe_filter is None:
        click.echo()
        click.echo("RECIPES")
        click.echo("=" * 50)
        for bucket, count in count_buckets(kitchen.recipes, kitchen.ingredients).items():
            click.echo(f"  {bucket:<8} {count}")
        click.echo()
        click.echo("Use 'fridge recipes list --filter <bucket>' to see a bucket.")
        return

    matches = classify(kitchen.recipes, kitchen.ingredients, recipe_filter)
    click.echo()
    click.echo(f"{recipe_filter.upper()} ({len(matches)})")
    click.echo("=" * 50)
    if not matches:
        click.echo("  No recipes in this bucket.")
    display_recipe_matches(matches)
    click.echo()


@recipes.command("add")
@click.argument("title")
@click.option("--ingredients", "-i", required=True, help="Comma-separated ingredient names")
@click.option("--url", "-u", help="Reference URL")
@click.option("--status", "-s", type=click.Choice(RECIPE_STATUSES), default="none")
@click.option("--symbol", help="Display symbol (default: picked from the ingredients)")
def recipes_add(title: str, ingredients: str, url: str | None, status: str, symbol: str | None):
    """Add a recipe.

    Examples:

        fridge recipes add "Kimchi Stew" -i "kimchi, tofu, pork"
    """
    kitchen = load()
    try:
        kitchen.recipes, recipe = create_recipe(
            kitchen.recipes, title, ingredients, url=url, status=status, symbol=symbol
        )
        save(kitchen)
    except USER_ERRORS as e:
        fail(str(e))

    click.echo(f"✓ Added {recipe.symbol} {recipe.title} [{recipe.id[:SHORT_ID]}]")


@recipes.command("edit")
@click.argument("recipe_id")
@click.option("--title", "-t", help="New title")
@click.option("--ingredients", "-i", help="New comma-separated ingredient names")
@click.option("--url", "-u", help="New reference URL (empty string to clear)")
@click.option("--status", "-s", type=click.Choice(RECIPE_STATUSES))
@click.option("--symbol", help="New symbol (empty string to pick one)")
def recipes_edit(
    recipe_id: str,
    title: str | None,
    ingredients: str | None,
    url: str | None,
    status: str | None,
    symbol: str | None,
):
    """Edit a recipe."""
    kitchen = load()
    full_id = resolve_id(kitchen.recipes, recipe_id, "recipe")

    changes = {
        key: value
        for key, value in (
            ("title", title),
            ("ingredients", ingredients),
            ("url", url),
            ("status", status),
            ("symbol", symbol),
        )
        if value is not None
    }
    if not changes:
        click.echo("Nothing to change.")
        return

    try:
        kitchen.recipes, recipe = update_recipe(kitchen.recipes, full_id, **changes)
        save(kitchen)
    except USER_ERRORS as e:
        fail(str(e))

    click.echo(f"✓ Updated {recipe.symbol} {recipe.title}")


@recipes.command("remove")
@click.argument("recipe_id")
def recipes_remove(recipe_id: str):
    """Remove a recipe."""
    kitchen = load()
    full_id = resolve_id(kitchen.recipes, recipe_id, "recipe")
    try:
        kitchen.recipes = remove_recipe(kitchen.recipes, full_id)
        save(kitchen)
    except USER_ERRORS as e:
        fail(str(e))
    click.echo("✓ Removed recipe")


def _toggle(recipe_id: str, status: str) -> None:
    kitchen = load()
    full_id = resolve_id(kitchen.recipes, recipe_id, "recipe")
    try:
        kitchen.recipes, recipe = toggle_status(kitchen.recipes, full_id, status)  # type: ignore[arg-type]
        save(kitchen)
    except USER_ERRORS as e:
        fail(str(e))
    click.echo(f"✓ {recipe.title}: {recipe.status}")


@recipes.command("star")
@click.argument("recipe_id")
def recipes_star(recipe_id: str):
    """Toggle the "always" flag on a recipe."""
    _toggle(recipe_id, "always")


@recipes.command("want")
@click.argument("recipe_id")
def recipes_want(recipe_id: str):
    """Toggle the "want to try" flag on a recipe."""
    _toggle(recipe_id, "want")


@recipes.command("link")
@click.argument("recipe_id")
def recipes_link(recipe_id: str):
    """Print the recipe's URL, or a web search for it."""
    kitchen = load()
    full_id = resolve_id(kitchen.recipes, recipe_id, "recipe")
    click.echo(recipe_link(get_recipe(kitchen.recipes, full_id)))


# ============================================================================
# Shopping Commands
# ============================================================================


@cli.group()
def shop():
    """Manage the shopping list."""
    pass


@shop.command("list")
@click.option("--pending", is_flag=True, help="Hide items already bought")
def shop_list(pending: bool):
    """Show the shopping list grouped by store."""
    kitchen = load()
    shopping = [i for i in kitchen.shopping if not (pending and i.completed)]

    groups = group_by_store(shopping)
    if not groups:
        click.echo("Shopping list is empty.")
        return

    for group in groups.values():
        click.echo()
        click.echo(f"{group.store} ({len(group.items)})  {format_price(group.total)}")
        click.echo("-" * 50)
        for item in group.items:
            check = "✓" if item.completed else " "
            price = f"  {format_price(item.price)}" if item.price > 0 else ""
            click.echo(f"  [{check}] {item.name}{price}  [{item.id[:SHORT_ID]}]")

    click.echo()
    click.echo(f"Total: {format_price(grand_total(shopping))}")


@shop.command("add")
@click.argument("name")
@click.option("--store", "-s", default="", help="Store to buy it at")
@click.option("--price", "-p", default="", help="Price, e.g. '3,500'")
def shop_add(name: str, store: str, price: str):
    """Add an item to the shopping list."""
    kitchen = load()
    try:
        kitchen.shopping, kitchen.stores, item = add_item(
            kitchen.shopping, kitchen.stores, name, store, price
        )
        save(kitchen)
    except USER_ERRORS as e:
        fail(str(e))
    click.echo(f"✓ Added {item.name} ({item.store}) [{item.id[:SHORT_ID]}]")


@shop.command("edit")
@click.argument("item_id")
@click.option("--name", "-n", help="New name")
@click.option("--store", "-s", help="New store")
@click.option("--price", "-p", help="New price")
def shop_edit(item_id: str, name: str | None, store: str | None, price: str | None):
    """Edit a shopping item. The item is marked as not bought."""
    kitchen = load()
    full_id = resolve_id(kitchen.shopping, item_id, "shopping item")
    current = get_item(kitchen.shopping, full_id)
    try:
        kitchen.shopping, kitchen.stores, item = update_item(
            kitchen.shopping,
            kitchen.stores,
            full_id,
            name if name is not None else current.name,
            store if store is not None else current.store,
            price if price is not None else current.price,
        )
        save(kitchen)
    except USER_ERRORS as e:
        fail(str(e))
    click.echo(f"✓ Updated {item.name}")


@shop.command("toggle")
@click.argument("item_id")
def shop_toggle(item_id: str):
    """Mark an item as bought, or not bought."""
    kitchen = load()
    full_id = resolve_id(kitchen.shopping, item_id, "shopping item")
    try:
        kitchen.shopping, item = toggle_completed(kitchen.shopping, full_id)
        save(kitchen)
    except USER_ERRORS as e:
        fail(str(e))
    click.echo(f"✓ {item.name}: {'bought' if item.completed else 'not bought'}")


@shop.command("remove")
@click.argument("item_id")
def shop_remove(item_id: str):
    """Remove an item from the shopping list."""
    kitchen = load()
    full_id = resolve_id(kitchen.shopping, item_id, "shopping item")
    try:
        kitchen.shopping = remove_item(kitchen.shopping, full_id)
        save(kitchen)
    except USER_ERRORS as e:
        fail(str(e))
    click.echo("✓ Removed item")


@shop.command("stores")
@click.argument("query", default="")
def shop_stores(query: str):
    """List known stores, or suggest stores matching QUERY."""
    kitchen = load()
    stores = kitchen.stores.suggest(query) if query else kitchen.stores.stores
    if not stores:
        click.echo("No stores yet.")
        return
    for store in stores:
        click.echo(f"  {store}")


@shop.command("add-missing")
@click.argument("recipe_id")
@click.option("--store", "-s", default="", help="Store to buy them at")
def shop_add_missing(recipe_id: str, store: str):
    """Put a recipe's missing ingredients on the shopping list."""
    kitchen = load()
    full_id = resolve_id(kitchen.recipes, recipe_id, "recipe")
    recipe = get_recipe(kitchen.recipes, full_id)
    missing = missing_requirements(recipe.ingredients, kitchen.ingredients)
    if not missing:
        click.echo(f"✓ You have everything for {recipe.title}")
        return

    try:
        kitchen.shopping, kitchen.stores, added = add_missing_items(
            kitchen.shopping, kitchen.stores, missing, store
        )
        save(kitchen)
    except USER_ERRORS as e:
        fail(str(e))

    click.echo(f"✓ Added {len(added)} item(s) for {recipe.title}:")
    for item in added:
        click.echo(f"  • {item.name}")


@shop.command("export")
@click.argument("output", type=click.Path())
@click.option("--format", "-f", type=click.Choice(["json", "md"]), help="Output format")
@click.option("--pending", is_flag=True, help="Leave out items already bought")
def shop_export(output: str, format: str | None, pending: bool):
    """Export the shopping list to JSON or Markdown."""
    kitchen = load()
    try:
        used = export_shopping_list(
            kitchen.shopping, output, format=format, include_completed=not pending
        )
    except OSError as e:
        fail(f"Export failed: {e}")
    click.echo(f"✓ Exported shopping list to {output} ({used})")


# ============================================================================
# AI Commands
# ============================================================================


@cli.group()
def ai():
    """AI helpers: expiry estimates and recipe ideas."""
    pass


@ai.command("set-key")
@click.option("--api-key", prompt="Gemini API key", hide_input=True)
def ai_set_key(api_key: str):
    """Save the Gemini API key."""
    save_api_key(api_key)
    click.echo("✓ API key saved")


@ai.command("clear-key")
def ai_clear_key():
    """Remove the saved Gemini API key."""
    clear_api_key()
    click.echo("✓ API key cleared")


@ai.command("expiry")
@click.argument("name")
@click.option(
    "--category", "-c", type=click.Choice(STORAGE_CATEGORIES), default="refrigerated"
)
@click.option("--purchased", "-p", type=DATE_TYPE, help="Purchase date (default: today)")
def ai_expiry(name: str, category: str, purchased: datetime | None):
    """Estimate when a food item expires."""
    try:
        expiry = estimate_expiry(
            get_generator(), name, category, _to_date(purchased) or date.today(), gate=_gate
        )
    except USER_ERRORS as e:
        fail(str(e))

    if expiry is None:
        click.echo("No expiry date suggested.")
    else:
        click.echo(f"⌛ {name}: {expiry.isoformat()}")


@ai.command("discover")
@click.argument("names", nargs=-1)
@click.option(
    "--category",
    "-c",
    type=click.Choice(STORAGE_CATEGORIES),
    help="Also use every owned ingredient in this section",
)
@click.option("--interactive", "-i", is_flag=True, help="Review the suggestion in a TUI")
@click.option("--seed", type=int, help="Seed for symbol selection")
def ai_discover(
    names: tuple[str, ...], category: str | None, interactive: bool, seed: int | None
):
    """Ask the AI for a recipe built around some ingredients.

    The suggestion is only added to your recipes if you accept it.

    Examples:

        fridge ai discover egg rice

        fridge ai discover --category frozen

        fridge ai discover kimchi tofu --interactive
    """
    kitchen = load()
    rng = random.Random(seed)

    selected = list(names)
    if category:
        selected += [i.name for i in group_by_category(kitchen.ingredients)[category]]  # type: ignore[index]
    if not normalize_requirements(selected):
        fail("Select at least one ingredient")

    try:
        click.echo("Asking for a recipe...")
        provisional = discover_recipe(get_generator(), selected, rng=rng, gate=_gate)
    except USER_ERRORS as e:
        fail(str(e))

    if interactive:
        decision = interactive_review(provisional, kitchen.ingredients)
    else:
        decision = simple_review_prompt(provisional, kitchen.ingredients)

    if not decision.accepted or decision.status is None:
        click.echo("Suggestion discarded.")
        return

    try:
        kitchen.recipes, recipe = accept_suggestion(
            kitchen.recipes, provisional, decision.status
        )
        save(kitchen)
    except USER_ERRORS as e:
        fail(str(e))

    click.echo(f"✓ Added {recipe.symbol} {recipe.title} [{recipe.id[:SHORT_ID]}]")


# ============================================================================
# Entry Point
# ============================================================================


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()

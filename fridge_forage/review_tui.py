"""Interactive TUI for accepting or discarding a suggested recipe."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import Button, DataTable, Footer, Header, Label, Static

from .matcher import find_owned_ingredient
from .models import Ingredient, Recipe, RecipeStatus


@dataclass
class ReviewDecision:
    """Outcome of reviewing a provisional recipe."""

    accepted: bool
    status: RecipeStatus | None = None


class SuggestionReviewScreen(App[ReviewDecision]):
    """Shows a suggested recipe against the fridge and asks where to file it."""

    CSS = """
    Screen {
        background: $surface;
    }

    #main-container {
        height: 100%;
        padding: 1;
    }

    #header-info {
        height: auto;
        padding: 1;
        background: $primary-background;
        color: $text;
    }

    #header-title {
        text-style: bold;
        padding-bottom: 1;
    }

    #header-desc {
        color: $text-muted;
    }

    #ingredients-table {
        height: 1fr;
        margin: 1 0;
    }

    #summary {
        height: 3;
        padding: 0 1;
        background: $surface-darken-1;
        content-align: center middle;
    }

    #button-bar {
        height: 3;
        align: center middle;
        padding: 0 1;
    }

    #button-bar Button {
        margin: 0 1;
    }
    """

    BINDINGS = [
        Binding("a", "accept_always", "Always"),
        Binding("w", "accept_want", "Want to try"),
        Binding("k", "accept_none", "Keep"),
        Binding("d", "discard", "Discard"),
        Binding("q", "discard", "Discard"),
        Binding("escape", "discard", "Discard"),
    ]

    def __init__(self, recipe: Recipe, ingredients: Sequence[Ingredient]) -> None:
        super().__init__()
        self.recipe = recipe
        self.ingredients = list(ingredients)
        self.rows = [
            (name, find_owned_ingredient(name, self.ingredients)) for name in recipe.ingredients
        ]

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="main-container"):
            with Vertical(id="header-info"):
                yield Label(f"{self.recipe.symbol} {self.recipe.title}", id="header-title")
                yield Label("Add this suggestion to your recipes?", id="header-desc")
            table = DataTable(id="ingredients-table")
            table.cursor_type = "row"
            table.add_columns("", "Ingredient", "In your fridge")
            yield table
            yield Static(self._get_summary(), id="summary")
            with Horizontal(id="button-bar"):
                yield Button("Always (a)", variant="warning", id="btn-always")
                yield Button("Want to try (w)", variant="primary", id="btn-want")
                yield Button("Keep (k)", variant="default", id="btn-none")
                yield Button("Discard (d)", variant="error", id="btn-discard")
        yield Footer()

    def on_mount(self) -> None:
        self.title = "Recipe Suggestion"
        table = self.query_one("#ingredients-table", DataTable)
        for name, owned in self.rows:
            if owned:
                table.add_row("[x]", name, f"{owned.symbol} {owned.name}")
            else:
                table.add_row("[ ]", name, "missing")

    def _get_summary(self) -> str:
        owned = sum(1 for _, ingredient in self.rows if ingredient)
        return f"Have: {owned} | Missing: {len(self.rows) - owned}"

    def action_accept_always(self) -> None:
        self.exit(ReviewDecision(accepted=True, status="always"))

    def action_accept_want(self) -> None:
        self.exit(ReviewDecision(accepted=True, status="want"))

    def action_accept_none(self) -> None:
        self.exit(ReviewDecision(accepted=True, status="none"))

    def action_discard(self) -> None:
        self.exit(ReviewDecision(accepted=False))

    @on(Button.Pressed, "#btn-always")
    def on_always_button(self) -> None:
        self.action_accept_always()

    @on(Button.Pressed, "#btn-want")
    def on_want_button(self) -> None:
        self.action_accept_want()

    @on(Button.Pressed, "#btn-none")
    def on_none_button(self) -> None:
        self.action_accept_none()

    @on(Button.Pressed, "#btn-discard")
    def on_discard_button(self) -> None:
        self.action_discard()


def interactive_review(recipe: Recipe, ingredients: Sequence[Ingredient]) -> ReviewDecision:
    """
    Launch interactive TUI for a suggested recipe.

    Args:
        recipe: The provisional recipe
        ingredients: Current ingredient store, to show what is already owned

    Returns:
        ReviewDecision with the chosen status, or accepted=False
    """
    app = SuggestionReviewScreen(recipe, ingredients)
    result = app.run()

    # Handle case where app exits without explicit result
    if result is None:
        return ReviewDecision(accepted=False)
    return result


_PROMPT_CHOICES: dict[str, RecipeStatus | None] = {
    "a": "always",
    "w": "want",
    "k": "none",
    "d": None,
}


def simple_review_prompt(recipe: Recipe, ingredients: Sequence[Ingredient]) -> ReviewDecision:
    """
    Simple CLI prompt for a suggested recipe (non-TUI fallback).

    Returns:
        ReviewDecision with the chosen status, or accepted=False
    """
    import click

    click.echo()
    click.echo("=" * 50)
    click.echo(f"{recipe.symbol} {recipe.title}")
    click.echo("=" * 50)
    for name in recipe.ingredients:
        owned = find_owned_ingredient(name, ingredients)
        marker = "✓" if owned else "✗"
        click.echo(f"  {marker} {name}")
    click.echo()

    choice = click.prompt(
        "Add as [a]lways, [w]ant to try, [k]eep, or [d]iscard",
        type=click.Choice(list(_PROMPT_CHOICES), case_sensitive=False),
        default="d",
        show_choices=False,
    )
    status = _PROMPT_CHOICES[choice.lower()]
    if status is None:
        return ReviewDecision(accepted=False)
    return ReviewDecision(accepted=True, status=status)

"""Shared fixtures for fridge-forage tests."""

from datetime import date

import pytest
import respx

from fridge_forage.models import Ingredient, Recipe, ShoppingItem


class FakeGenerator:
    """Text generator returning canned responses and recording prompts."""

    def __init__(self, response: str = "", error: Exception | None = None):
        self.response = response
        self.error = error
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


def make_ingredient(name: str, category: str = "refrigerated", **kwargs) -> Ingredient:
    """Create an Ingredient with a readable id for testing."""
    return Ingredient(
        id=kwargs.pop("id", f"ing-{name}"),
        name=name,
        symbol=kwargs.pop("symbol", "📦"),
        category=category,  # type: ignore[arg-type]
        purchase_date=kwargs.pop("purchase_date", date(2026, 10, 1)),
        **kwargs,
    )


def make_recipe(title: str, ingredients: list[str], status: str = "none", **kwargs) -> Recipe:
    """Create a Recipe with a readable id for testing."""
    return Recipe(
        id=kwargs.pop("id", f"rec-{title}"),
        title=title,
        ingredients=ingredients,
        status=status,  # type: ignore[arg-type]
        symbol=kwargs.pop("symbol", "🥘"),
        **kwargs,
    )


@pytest.fixture
def fridge() -> list[Ingredient]:
    """A small, realistic ingredient store."""
    return [
        make_ingredient("spring onion, 3 stalks"),
        make_ingredient("egg"),
        make_ingredient("rice", category="ambient"),
        make_ingredient("soy sauce", category="condiment"),
        make_ingredient("pork belly", category="frozen"),
    ]


@pytest.fixture
def catalog() -> list[Recipe]:
    """Recipes with varying numbers of missing ingredients against `fridge`."""
    return [
        make_recipe("Kimchi Stew", ["kimchi", "tofu", "pork"]),  # 2 missing
        make_recipe("Egg Rice", ["egg", "rice", "soy sauce"]),  # 0 missing
        make_recipe("Fried Rice", ["rice", "egg", "carrot"]),  # 1 missing
        make_recipe("Bibimbap", ["rice", "egg", "spinach", "bean sprout", "gochujang"]),  # 3
        make_recipe("Onion Soup", ["onion", "butter"], status="always"),  # 1 missing
        make_recipe("Pork Bowl", ["pork", "rice"], status="want"),  # 0 missing
    ]


@pytest.fixture
def shopping_items() -> list[ShoppingItem]:
    return [
        ShoppingItem(id="s1", name="tofu", store="Emart", price=1500),
        ShoppingItem(id="s2", name="kimchi", store="Market", price=8000),
        ShoppingItem(id="s3", name="carrot", store="unspecified", price=0),
        ShoppingItem(id="s4", name="milk", store="Emart", price=2900, completed=True),
    ]


@pytest.fixture
def fake_generator():
    """Factory for FakeGenerator instances."""
    return FakeGenerator


@pytest.fixture
def mock_httpx():
    """Activate respx mock for HTTP requests."""
    with respx.mock(assert_all_called=False) as respx_mock:
        yield respx_mock


@pytest.fixture
def temp_data_dir(tmp_path, monkeypatch):
    """Point the CLI at a temporary data directory."""
    data_dir = tmp_path / "data"
    data_dir.mkdir()
    monkeypatch.setattr("fridge_forage.cli.DATA_DIR", data_dir)
    return data_dir

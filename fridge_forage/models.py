"""Core entities: stored ingredients, recipes and shopping items."""

import uuid
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Literal

StorageCategory = Literal["refrigerated", "frozen", "ambient", "condiment"]
RecipeStatus = Literal["always", "want", "none"]

# Display order of the storage sections
STORAGE_CATEGORIES: tuple[StorageCategory, ...] = (
    "refrigerated",
    "frozen",
    "ambient",
    "condiment",
)
RECIPE_STATUSES: tuple[RecipeStatus, ...] = ("always", "want", "none")

UNSPECIFIED_STORE = "unspecified"
PROVISIONAL_ID_PREFIX = "temp-"


class ValidationError(Exception):
    """Raised when a submission is missing a required field or has a bad value."""

    pass


class NotFoundError(Exception):
    """Raised when an id does not exist in a collection."""

    pass


def new_id() -> str:
    """Generate an opaque unique identity."""
    return uuid.uuid4().hex


def require_text(value: str | None, field_name: str) -> str:
    """Return the value stripped, raising ValidationError when it is blank or not text."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def optional_text(value: Any, field_name: str) -> str | None:
    """Return stripped text, or None when blank; non-text values are rejected."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be text")
    return value.strip() or None


def normalize_requirements(raw: str | Iterable[str]) -> list[str]:
    """
    Turn user input into a clean requirement list.

    Strings are split on commas. Entries are trimmed, empty entries are
    dropped, and exact duplicates (case-sensitive) are removed keeping the
    first occurrence.

    Raises:
        ValidationError: If an entry is not text
    """
    parts = raw.split(",") if isinstance(raw, str) else raw
    seen: set[str] = set()
    result: list[str] = []
    for part in parts:
        if not isinstance(part, str):
            raise ValidationError("Ingredient names must be text")
        name = part.strip()
        if name and name not in seen:
            seen.add(name)
            result.append(name)
    return result


def check_category(category: str) -> StorageCategory:
    if category not in STORAGE_CATEGORIES:
        raise ValidationError(
            f"Unknown storage category '{category}' "
            f"(expected one of: {', '.join(STORAGE_CATEGORIES)})"
        )
    return category  # type: ignore[return-value]


def check_status(status: str) -> RecipeStatus:
    if status not in RECIPE_STATUSES:
        raise ValidationError(
            f"Unknown recipe status '{status}' (expected one of: {', '.join(RECIPE_STATUSES)})"
        )
    return status  # type: ignore[return-value]


@dataclass
class Ingredient:
    """A food item currently owned."""

    id: str
    name: str
    symbol: str
    quantity: str = ""
    category: StorageCategory = "refrigerated"
    purchase_date: date = field(default_factory=date.today)
    expiry_date: date | None = None
    label: str | None = None

    def is_expired(self, today: date | None = None) -> bool:
        """Check whether the expiry date lies strictly before today."""
        if self.expiry_date is None:
            return False
        return self.expiry_date < (today or date.today())

    def to_dict(self) -> dict[str, Any]:
        """Convert ingredient to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "symbol": self.symbol,
            "quantity": self.quantity,
            "category": self.category,
            "purchase_date": self.purchase_date.isoformat(),
            "expiry_date": self.expiry_date.isoformat() if self.expiry_date else None,
            "label": self.label,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Ingredient":
        """Create ingredient from dictionary."""
        expiry = data.get("expiry_date")
        return cls(
            id=require_text(data.get("id"), "Ingredient id"),
            name=require_text(data.get("name"), "Ingredient name"),
            symbol=optional_text(data.get("symbol"), "Symbol") or "",
            quantity=optional_text(data.get("quantity"), "Quantity") or "",
            category=check_category(data.get("category", "refrigerated")),
            purchase_date=date.fromisoformat(data["purchase_date"]),
            expiry_date=date.fromisoformat(expiry) if expiry else None,
            label=optional_text(data.get("label"), "Label"),
        )


@dataclass
class Recipe:
    """A recipe with its bare requirement names."""

    id: str
    title: str
    ingredients: list[str] = field(default_factory=list)
    url: str | None = None
    status: RecipeStatus = "none"
    symbol: str = ""

    @property
    def is_provisional(self) -> bool:
        """True for AI suggestions not yet accepted into the catalog."""
        return self.id.startswith(PROVISIONAL_ID_PREFIX)

    def to_dict(self) -> dict[str, Any]:
        """Convert recipe to dictionary for serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "ingredients": list(self.ingredients),
            "url": self.url,
            "status": self.status,
            "symbol": self.symbol,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Recipe":
        """Create recipe from dictionary."""
        ingredients = data.get("ingredients", [])
        if not isinstance(ingredients, list):
            raise ValidationError("Recipe ingredients must be a list")
        return cls(
            id=require_text(data.get("id"), "Recipe id"),
            title=require_text(data.get("title"), "Recipe title"),
            ingredients=normalize_requirements(ingredients),
            url=optional_text(data.get("url"), "Recipe URL"),
            status=check_status(data.get("status", "none")),
            symbol=optional_text(data.get("symbol"), "Symbol") or "",
        )


@dataclass
class ShoppingItem:
    """An entry on the shopping list."""

    id: str
    name: str
    store: str = UNSPECIFIED_STORE
    price: int = 0
    completed: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert item to dictionary for serialization."""
        return {
            "id": self.id,
            "name": self.name,
            "store": self.store,
            "price": self.price,
            "completed": self.completed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ShoppingItem":
        """Create item from dictionary."""
        price = data.get("price", 0)
        if isinstance(price, bool) or not isinstance(price, int) or price < 0:
            raise ValidationError(f"Invalid price {price!r}")
        return cls(
            id=require_text(data.get("id"), "Item id"),
            name=require_text(data.get("name"), "Item name"),
            store=optional_text(data.get("store"), "Store") or UNSPECIFIED_STORE,
            price=price,
            completed=bool(data.get("completed", False)),
        )

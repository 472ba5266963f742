"""Shopping list export in various formats."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from .models import ShoppingItem
from .shopping import grand_total, group_by_store


def format_price(amount: int) -> str:
    """Format a price with thousands separators, e.g. 3500 -> "3,500"."""
    return f"{amount:,}"


def export_to_json(
    items: list[ShoppingItem],
    filepath: str | Path,
    *,
    include_completed: bool = True,
) -> None:
    """
    Export the shopping list, grouped by store, to JSON format.

    Args:
        items: Shopping items
        filepath: Output file path
        include_completed: Include items already bought
    """
    if not include_completed:
        items = [i for i in items if not i.completed]

    groups = group_by_store(items)
    data: dict[str, Any] = {
        "exported_at": datetime.now().isoformat(),
        "stores": [
            {
                "store": group.store,
                "total": group.total,
                "items": [
                    {"name": i.name, "price": i.price, "completed": i.completed}
                    for i in group.items
                ],
            }
            for group in groups.values()
        ],
        "summary": {
            "total_items": len(items),
            "completed": sum(1 for i in items if i.completed),
            "total": grand_total(items),
        },
    }

    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False)


def export_to_markdown(
    items: list[ShoppingItem],
    filepath: str | Path,
    *,
    include_completed: bool = True,
) -> None:
    """
    Export the shopping list, grouped by store, to Markdown format.

    Args:
        items: Shopping items
        filepath: Output file path
        include_completed: Include items already bought
    """
    if not include_completed:
        items = [i for i in items if not i.completed]

    lines: list[str] = []
    lines.append("# Shopping List")
    lines.append("")
    lines.append(f"*Generated: {datetime.now().strftime('%Y-%m-%d %H:%M')}*")
    lines.append("")

    for group in group_by_store(items).values():
        lines.append(f"## {group.store} ({len(group.items)}) - {format_price(group.total)}")
        lines.append("")
        for item in group.items:
            check = "x" if item.completed else " "
            price = f" - {format_price(item.price)}" if item.price > 0 else ""
            lines.append(f"- [{check}] {item.name}{price}")
        lines.append("")

    lines.append(f"**Total:** {format_price(grand_total(items))}")
    lines.append("")

    with open(filepath, "w", encoding="utf-8") as f:
        f.write("\n".join(lines))


def export_shopping_list(
    items: list[ShoppingItem],
    filepath: str | Path,
    *,
    format: str | None = None,
    include_completed: bool = True,
) -> str:
    """
    Export the shopping list to file.

    Format is auto-detected from file extension if not specified.

    Returns:
        The format used for export
    """
    path = Path(filepath)

    # Auto-detect format from extension
    if format is None:
        ext = path.suffix.lower()
        format_map = {
            ".json": "json",
            ".md": "md",
            ".markdown": "md",
        }
        format = format_map.get(ext, "md")

    if format == "json":
        export_to_json(items, filepath, include_completed=include_completed)
    elif format in ("md", "markdown"):
        export_to_markdown(items, filepath, include_completed=include_completed)
    else:
        raise ValueError(f"Unsupported format: {format}")

    return format

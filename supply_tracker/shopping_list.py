from datetime import date
from typing import Optional, Sequence

from . import settings
from .errors import EmptySelectionError
from .reorder import format_quantity
from .schemas import InventoryItem, ItemUpdate, Priority, ReorderAlert

SECTION_RULE = "─" * 21
SUMMARY_RULE = "═" * 21


def estimated_cost(item: InventoryItem) -> Optional[float]:
    """Cost of one standard reorder, or None when the unit cost is unknown."""
    if item.unit_cost is None:
        return None
    return item.unit_cost * item.reorder_quantity


def estimated_total(selected: Sequence[ReorderAlert]) -> float:
    # Items without a unit cost contribute nothing.
    return sum(estimated_cost(alert.item) or 0.0 for alert in selected)


def _format_item(item: InventoryItem) -> list[str]:
    lines = [
        "",
        item.item_name,
        f"  • Order: {format_quantity(item.reorder_quantity, item.unit)}",
        f"  • Current: {format_quantity(item.current_quantity, item.unit)}",
    ]
    if item.supplier:
        lines.append(f"  • Supplier: {item.supplier}")
    if item.supplier_sku:
        lines.append(f"  • SKU: {item.supplier_sku}")
    cost = estimated_cost(item)
    if cost is not None:
        lines.append(f"  • Est. Cost: ${cost:.2f}")
    return lines


def build_shopping_list(
    selected: Sequence[ReorderAlert], generated: Optional[date] = None
) -> str:
    """
    Renders the selected reorder alerts as a plain-text list for sharing.

    Items are grouped critical, urgent, low (empty groups are left out) and
    the list ends with the item count and the estimated total.
    """
    if not selected:
        raise EmptySelectionError("shopping list")

    generated = generated or date.today()
    lines = [
        f"📋 {settings.SHOPPING_LIST_TITLE}",
        f"Generated: {generated.isoformat()}",
        "",
    ]

    for name in settings.PRIORITY_ORDER:
        priority = Priority(name)
        bucket = [alert for alert in selected if alert.priority == priority]
        if not bucket:
            continue
        lines.append(f"{settings.PRIORITY_EMOJI[name]} {name.upper()}")
        lines.append(SECTION_RULE)
        for alert in bucket:
            lines.extend(_format_item(alert.item))
        lines.append("")

    lines.append(SUMMARY_RULE)
    lines.append(f"Total Items: {len(selected)}")
    lines.append(f"Estimated Total: ${estimated_total(selected):.2f}")
    return "\n".join(lines) + "\n"


def mark_as_ordered(
    selected: Sequence[ReorderAlert], ordered_on: Optional[date] = None
) -> list[ItemUpdate]:
    """Records that the selected items were ordered. Stock changes only on receipt."""
    if not selected:
        raise EmptySelectionError("mark as ordered")

    ordered_on = ordered_on or date.today()
    return [
        ItemUpdate(item_id=alert.item_id, last_ordered_date=ordered_on)
        for alert in selected
    ]

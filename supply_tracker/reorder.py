import math
from typing import Iterable

from . import settings
from .schemas import InventoryItem, InventoryStats, Priority, ReorderAlert


def needs_reorder(item: InventoryItem) -> bool:
    """An item needs restocking once it is at or below its reorder point."""
    return item.current_quantity <= item.reorder_point


def urgent_threshold(item: InventoryItem) -> int:
    return math.floor(item.reorder_point * settings.URGENT_RATIO)


def classify_priority(item: InventoryItem) -> Priority:
    """
    Buckets an item that needs reordering:
    - critical: out of stock
    - urgent: at or below half the reorder point (rounded down)
    - low: anything else up to the reorder point

    Callers filter with `needs_reorder` first; an item above its reorder
    point falls through to low.
    """
    if item.current_quantity == 0:
        return Priority.CRITICAL
    if item.current_quantity <= urgent_threshold(item):
        return Priority.URGENT
    return Priority.LOW


def sort_key(alert: ReorderAlert) -> tuple[int, str]:
    return alert.priority.rank, alert.name.lower()


def build_reorder_alerts(items: Iterable[InventoryItem]) -> list[ReorderAlert]:
    """Filters the snapshot down to items needing reorder, most urgent first."""
    alerts = [
        ReorderAlert(item=item, priority=classify_priority(item))
        for item in items
        if needs_reorder(item)
    ]
    return sorted(alerts, key=sort_key)


def alerts_by_priority(alerts: Iterable[ReorderAlert], priority: Priority) -> list[ReorderAlert]:
    return [alert for alert in alerts if alert.priority == priority]


def inventory_stats(items: Iterable[InventoryItem]) -> InventoryStats:
    items = list(items)
    return InventoryStats(
        total=len(items),
        low_stock=sum(1 for item in items if needs_reorder(item)),
        out_of_stock=sum(1 for item in items if item.current_quantity == 0),
    )


def format_quantity(quantity: int, unit: str) -> str:
    """'1 box', '3 boxs'. Units are stored singular."""
    return f"{quantity} {unit}" if quantity == 1 else f"{quantity} {unit}s"

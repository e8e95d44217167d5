"""
Builders for the writes that follow a count, receipt or checkout.

Nothing here touches the database: each function returns the item update
and the transaction records for the caller to persist.
"""
from datetime import datetime
from typing import Optional, Sequence

from .errors import EmptySelectionError, InvalidInputError
from .reconciliation import cash_variance, parse_cash_amount, parse_count
from .schemas import (
    CountSubmission,
    CountTotals,
    InventoryItem,
    ItemUpdate,
    TransactionRecord,
)


def _parse_positive_quantity(value, field: str = "quantity") -> int:
    quantity = parse_count(value, field)
    if quantity == 0:
        raise InvalidInputError(field, value, "must be greater than 0")
    return quantity


def count_payloads(
    submissions: Sequence[CountSubmission], actor: str, timestamp: datetime
) -> tuple[list[ItemUpdate], list[TransactionRecord]]:
    updates = []
    records = []
    for submission in submissions:
        item = submission.item
        updates.append(
            ItemUpdate(item_id=item.id, current_quantity=submission.actual_count)
        )
        records.append(
            TransactionRecord(
                supply_item_id=item.id,
                transaction_type="inventory_count",
                quantity=submission.items_sold,
                previous_quantity=item.current_quantity,
                new_quantity=submission.actual_count,
                performed_by=actor,
                transaction_date=timestamp,
                unit_cost_at_transaction=item.unit_cost,
                charge_price_at_transaction=item.charge_price,
                expected_cash=submission.expected_revenue,
                notes=(
                    f"Inventory count - {submission.items_sold} sold, "
                    f"{submission.variance} variance"
                ),
            )
        )
        if submission.variance < 0:
            missing = abs(submission.variance)
            records.append(
                TransactionRecord(
                    supply_item_id=item.id,
                    transaction_type="shrinkage",
                    quantity=missing,
                    previous_quantity=item.current_quantity,
                    new_quantity=submission.actual_count,
                    performed_by=actor,
                    transaction_date=timestamp,
                    unit_cost_at_transaction=item.unit_cost,
                    charge_price_at_transaction=item.charge_price,
                    notes=f"Shrinkage detected: {missing} items missing",
                )
            )
    return updates, records


def cash_count_transaction(
    submissions: Sequence[CountSubmission],
    totals: CountTotals,
    actual_cash: float,
    actor: str,
    timestamp: datetime,
    notes: str = "",
) -> TransactionRecord:
    """
    One cash reconciliation record per count. It hangs off the first
    counted item because transactions must reference a supply item.
    """
    if not submissions:
        raise EmptySelectionError("cash count")

    items_list = ", ".join(
        f"{s.item.item_name} ({s.items_sold})" for s in submissions
    )
    summary = f"Cash reconciliation - Items: {items_list}."
    if notes.strip():
        summary = f"{summary} {notes.strip()}"

    return TransactionRecord(
        supply_item_id=submissions[0].item.id,
        transaction_type="cash_count",
        quantity=totals.total_items_sold,
        previous_quantity=0,
        new_quantity=0,
        performed_by=actor,
        transaction_date=timestamp,
        expected_cash=totals.total_expected_revenue,
        actual_cash=actual_cash,
        cash_variance=cash_variance(actual_cash, totals.total_expected_revenue),
        notes=summary,
    )


def apply_receipt(
    item: InventoryItem,
    quantity,
    actor: str,
    timestamp: datetime,
    unit_cost: Optional[float] = None,
    vendor: Optional[str] = None,
    notes: Optional[str] = None,
) -> tuple[ItemUpdate, TransactionRecord]:
    """Stock arriving from a vendor. A new unit cost or vendor overwrites the item's."""
    received = _parse_positive_quantity(quantity)
    if unit_cost is not None:
        unit_cost = parse_cash_amount(unit_cost, "unit cost")
    new_quantity = item.current_quantity + received
    vendor = vendor.strip() if vendor else None

    update = ItemUpdate(
        item_id=item.id,
        current_quantity=new_quantity,
        unit_cost=unit_cost,
        supplier=vendor,
    )
    record = TransactionRecord(
        supply_item_id=item.id,
        transaction_type="received",
        quantity=received,
        previous_quantity=item.current_quantity,
        new_quantity=new_quantity,
        performed_by=actor,
        transaction_date=timestamp,
        unit_cost_at_transaction=unit_cost,
        notes=(notes or "").strip()
        or f"Received {received} {item.unit}(s) from {vendor or 'vendor'}",
    )
    return update, record


def apply_dispense(
    item: InventoryItem,
    quantity,
    actor: str,
    timestamp: datetime,
    notes: Optional[str] = None,
) -> tuple[ItemUpdate, TransactionRecord]:
    dispensed = _parse_positive_quantity(quantity)
    if dispensed > item.current_quantity:
        raise InvalidInputError(
            "quantity", quantity, f"only {item.current_quantity} {item.unit}(s) in stock"
        )
    new_quantity = item.current_quantity - dispensed

    update = ItemUpdate(item_id=item.id, current_quantity=new_quantity)
    record = TransactionRecord(
        supply_item_id=item.id,
        transaction_type="dispensed",
        quantity=dispensed,
        previous_quantity=item.current_quantity,
        new_quantity=new_quantity,
        performed_by=actor,
        transaction_date=timestamp,
        unit_cost_at_transaction=item.unit_cost,
        notes=(notes or "").strip() or f"Dispensed {dispensed} {item.unit}(s)",
    )
    return update, record

"""
Physical count reconciliation.

A count replaces an item's recorded quantity with what is actually on the
shelf. For items sold from the shelf the difference is treated as sales,
and the expected revenue is compared with the cash in the box.
"""
import math
from numbers import Integral, Real
from typing import Iterable

from .errors import InvalidInputError
from .schemas import CashStatus, CountSubmission, CountTotals, InventoryItem


def parse_count(value, field: str = "actual count") -> int:
    """Coerces user-entered counts to a non-negative int, rejecting anything else."""
    if value is None or isinstance(value, bool):
        raise InvalidInputError(field, value)

    if isinstance(value, str):
        text = value.strip()
        if not (text.isascii() and text.isdigit()):
            raise InvalidInputError(field, value)
        return int(text)

    if isinstance(value, Integral):
        count = int(value)
    elif isinstance(value, Real) and math.isfinite(value) and float(value).is_integer():
        count = int(value)
    else:
        raise InvalidInputError(field, value, "must be a whole number")

    if count < 0:
        raise InvalidInputError(field, value)
    return count


def parse_cash_amount(value, field: str = "cash amount") -> float:
    if value is None or isinstance(value, bool):
        raise InvalidInputError(field, value)

    if isinstance(value, str):
        if not value.strip():
            raise InvalidInputError(field, value)
        try:
            amount = float(value.strip().lstrip("$"))
        except ValueError:
            raise InvalidInputError(field, value) from None
    elif isinstance(value, Real):
        amount = float(value)
    else:
        raise InvalidInputError(field, value)

    if not math.isfinite(amount) or amount < 0:
        raise InvalidInputError(field, value)
    return amount


def apply_count(item: InventoryItem, actual_count) -> CountSubmission:
    """
    Computes the derived fields of a count for one item.

    items_sold is current - actual without clamping, so an overage shows up
    as negative sales and negative expected revenue. Callers that present
    these figures should treat a negative value as overage.
    """
    actual = parse_count(actual_count)

    items_sold = item.current_quantity - actual
    if item.is_for_sale:
        expected_revenue = items_sold * (item.charge_price or 0.0)
    else:
        expected_revenue = 0.0

    return CountSubmission(
        item=item,
        actual_count=actual,
        items_sold=items_sold,
        expected_revenue=expected_revenue,
        variance=actual - item.current_quantity,
    )


def aggregate_counts(submissions: Iterable[CountSubmission]) -> CountTotals:
    submissions = list(submissions)
    for_sale = [s for s in submissions if s.item.is_for_sale]
    return CountTotals(
        items_counted=len(submissions),
        total_items_sold=sum(s.items_sold for s in for_sale),
        # fsum keeps the total independent of submission order.
        total_expected_revenue=math.fsum(s.expected_revenue for s in for_sale),
        total_shrinkage=sum(-s.variance for s in for_sale if s.variance < 0),
        total_overage=sum(s.variance for s in for_sale if s.variance > 0),
    )


def cash_variance(actual_cash: float, total_expected_revenue: float) -> float:
    return actual_cash - total_expected_revenue


def classify_cash_variance(variance: float) -> CashStatus:
    # Compare at cent precision so float noise does not read as over/short.
    cents = round(variance, 2)
    if cents > 0:
        return CashStatus.OVER
    if cents < 0:
        return CashStatus.SHORT
    return CashStatus.PERFECT

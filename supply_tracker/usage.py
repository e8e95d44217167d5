import math
from datetime import datetime, timedelta
from typing import Optional, Sequence

import pandas as pd

from . import settings
from .errors import InvalidInputError
from .schemas import (
    CashMetrics,
    CategoryShare,
    InventoryItem,
    ReorderFrequency,
    ShrinkageItem,
    TransactionRecord,
    UsageMetrics,
    UsedItem,
)

UNKNOWN = "Unknown"


def range_start(time_range: str, now: Optional[datetime] = None) -> Optional[pd.Timestamp]:
    """Start of the reporting window in UTC, or None for all time."""
    if time_range not in settings.USAGE_TIME_RANGES:
        raise InvalidInputError(
            "time range",
            time_range,
            f"must be one of {', '.join(settings.USAGE_TIME_RANGES)}",
        )
    days = settings.USAGE_TIME_RANGES[time_range]
    if days is None:
        return None

    current = pd.Timestamp(now) if now is not None else pd.Timestamp.now(tz="UTC")
    current = current.tz_localize("UTC") if current.tzinfo is None else current.tz_convert("UTC")
    return current - timedelta(days=days)


def _transactions_frame(
    transactions: Sequence[TransactionRecord], items: Sequence[InventoryItem]
) -> pd.DataFrame:
    df = pd.DataFrame([t.model_dump() for t in transactions])
    # Naive timestamps are treated as UTC, which is what the backend stores.
    df["transaction_date"] = pd.to_datetime(df["transaction_date"], utc=True)

    item_df = pd.DataFrame(
        [
            {
                "supply_item_id": item.id,
                "item_name": item.item_name,
                "category": item.category or UNKNOWN,
                "unit_cost": item.unit_cost,
            }
            for item in items
        ],
        columns=["supply_item_id", "item_name", "category", "unit_cost"],
    )
    df = df.merge(item_df, on="supply_item_id", how="left")
    df["item_name"] = df["item_name"].fillna(UNKNOWN)
    df["category"] = df["category"].fillna(UNKNOWN)
    df["unit_cost"] = df["unit_cost"].astype(float).fillna(0.0)
    return df


def _rank(df: pd.DataFrame, column: str) -> pd.DataFrame:
    return (
        df.sort_values([column, "item_name"], ascending=[False, True])
        .head(settings.USAGE_TOP_N)
        .reset_index(drop=True)
    )


def _top_used(df: pd.DataFrame) -> list[UsedItem]:
    dispensed = df[df["transaction_type"] == "dispensed"]
    if dispensed.empty:
        return []
    grouped = (
        dispensed.groupby("item_name")
        .agg(used=("quantity", "sum"), category=("category", "first"))
        .reset_index()
    )
    return [
        UsedItem(name=row.item_name, count=int(row.used), category=row.category)
        for row in _rank(grouped, "used").itertuples(index=False)
    ]


def _shrinkage_items(df: pd.DataFrame) -> list[ShrinkageItem]:
    shrinkage = df[df["transaction_type"] == "shrinkage"]
    if shrinkage.empty:
        return []
    grouped = (
        shrinkage.groupby("item_name")
        .agg(lost=("quantity", "sum"), unit_cost=("unit_cost", "first"))
        .reset_index()
    )
    grouped["value"] = grouped["unit_cost"] * grouped["lost"]
    return [
        ShrinkageItem(name=row.item_name, lost=int(row.lost), value=float(row.value))
        for row in _rank(grouped, "value").itertuples(index=False)
    ]


def _reorder_frequency(df: pd.DataFrame) -> list[ReorderFrequency]:
    received = df[df["transaction_type"] == "received"]
    if received.empty:
        return []
    grouped = received.groupby("item_name").size().rename("times_ordered").reset_index()
    return [
        ReorderFrequency(name=row.item_name, times_ordered=int(row.times_ordered))
        for row in _rank(grouped, "times_ordered").itertuples(index=False)
    ]


def _category_breakdown(top_used: list[UsedItem]) -> list[CategoryShare]:
    counts: dict[str, int] = {}
    for used in top_used:
        counts[used.category] = counts.get(used.category, 0) + used.count

    total = sum(counts.values())
    shares = [
        CategoryShare(
            category=category,
            count=count,
            # Half rounds up, as percentages are shown to users.
            percentage=math.floor(count / total * 100 + 0.5) if total > 0 else 0,
        )
        for category, count in counts.items()
    ]
    return sorted(shares, key=lambda share: (-share.count, share.category))


def _cash_metrics(df: pd.DataFrame) -> CashMetrics:
    cash = df[df["transaction_type"] == "cash_count"]
    performed = len(cash)
    if performed == 0:
        return CashMetrics()
    total_variance = float(cash["cash_variance"].fillna(0).sum())
    return CashMetrics(
        total_revenue=float(cash["expected_cash"].fillna(0).sum()),
        total_variance=total_variance,
        average_variance=total_variance / performed,
        cash_counts_performed=performed,
    )


def usage_metrics(
    transactions: Sequence[TransactionRecord],
    items: Sequence[InventoryItem],
    time_range: str = "30d",
    now: Optional[datetime] = None,
) -> UsageMetrics:
    """
    Summarises supply activity within the reporting window: totals per
    transaction type, most used items, shrinkage by value, how often items
    are restocked and cash count results.
    """
    start = range_start(time_range, now)
    metrics = UsageMetrics(time_range=time_range)
    if not transactions:
        return metrics

    df = _transactions_frame(transactions, items)
    if start is not None:
        df = df[df["transaction_date"] > start]
    if df.empty:
        return metrics

    totals = df.groupby("transaction_type")["quantity"].sum()
    metrics.total_transactions = len(df)
    metrics.total_items_dispensed = int(totals.get("dispensed", 0))
    metrics.total_items_received = int(totals.get("received", 0))
    metrics.total_shrinkage = int(totals.get("shrinkage", 0))
    metrics.top_used_items = _top_used(df)
    metrics.shrinkage_items = _shrinkage_items(df)
    metrics.reorder_frequency = _reorder_frequency(df)
    metrics.category_breakdown = _category_breakdown(metrics.top_used_items)
    metrics.cash_metrics = _cash_metrics(df)
    return metrics

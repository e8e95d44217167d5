from datetime import datetime, timedelta, timezone

import pytest

from supply_tracker.errors import InvalidInputError
from supply_tracker.schemas import TransactionRecord
from supply_tracker.usage import range_start, usage_metrics

NOW = datetime(2024, 6, 30, 12, 0, tzinfo=timezone.utc)


def txn(item_id, kind, quantity, days_ago=1, **extra):
    return TransactionRecord(
        supply_item_id=item_id,
        transaction_type=kind,
        quantity=quantity,
        previous_quantity=0,
        new_quantity=0,
        performed_by="Sam",
        transaction_date=NOW - timedelta(days=days_ago),
        **extra,
    )


@pytest.fixture
def items(make_item):
    return [
        make_item(id="pens", item_name="Pens", category="Writing", unit_cost=0.5),
        make_item(id="paper", item_name="Paper", category="Paper", unit_cost=4.0),
        make_item(id="gum", item_name="Gum", category="Snacks", unit_cost=0.25),
    ]


def test_usage_metrics_totals_and_rankings(items):
    transactions = [
        txn("pens", "dispensed", 5),
        txn("pens", "dispensed", 3),
        txn("paper", "dispensed", 6),
        txn("gum", "dispensed", 1),
        txn("paper", "received", 10),
        txn("paper", "received", 10),
        txn("pens", "received", 50),
        txn("gum", "shrinkage", 8),
        txn("paper", "shrinkage", 1),
        txn("gum", "cash_count", 4, expected_cash=10.0, actual_cash=9.0, cash_variance=-1.0),
        txn("gum", "cash_count", 2, expected_cash=5.0, actual_cash=8.0, cash_variance=3.0),
    ]

    metrics = usage_metrics(transactions, items, "30d", now=NOW)

    assert metrics.total_transactions == 11
    assert metrics.total_items_dispensed == 15
    assert metrics.total_items_received == 70
    assert metrics.total_shrinkage == 9
    assert [(u.name, u.count, u.category) for u in metrics.top_used_items] == [
        ("Pens", 8, "Writing"),
        ("Paper", 6, "Paper"),
        ("Gum", 1, "Snacks"),
    ]
    # Paper loses more value (1 x 4.00) than gum (8 x 0.25).
    assert [(s.name, s.lost, s.value) for s in metrics.shrinkage_items] == [
        ("Paper", 1, 4.0),
        ("Gum", 8, 2.0),
    ]
    assert [(r.name, r.times_ordered) for r in metrics.reorder_frequency] == [
        ("Paper", 2),
        ("Pens", 1),
    ]
    assert [(c.category, c.count, c.percentage) for c in metrics.category_breakdown] == [
        ("Writing", 8, 53),
        ("Paper", 6, 40),
        ("Snacks", 1, 7),
    ]
    assert metrics.cash_metrics.cash_counts_performed == 2
    assert metrics.cash_metrics.total_revenue == 15.0
    assert metrics.cash_metrics.total_variance == 2.0
    assert metrics.cash_metrics.average_variance == 1.0


def test_usage_metrics_respects_time_range(items):
    transactions = [
        txn("pens", "dispensed", 5, days_ago=3),
        txn("pens", "dispensed", 7, days_ago=20),
        txn("pens", "dispensed", 9, days_ago=200),
    ]
    assert usage_metrics(transactions, items, "7d", now=NOW).total_items_dispensed == 5
    assert usage_metrics(transactions, items, "30d", now=NOW).total_items_dispensed == 12
    assert usage_metrics(transactions, items, "all", now=NOW).total_items_dispensed == 21


def test_usage_metrics_unknown_items_and_empty_windows(items):
    transactions = [txn("ghost", "dispensed", 2)]
    metrics = usage_metrics(transactions, items, "30d", now=NOW)
    assert [(u.name, u.category) for u in metrics.top_used_items] == [("Unknown", "Unknown")]

    old = [txn("pens", "dispensed", 2, days_ago=45)]
    empty = usage_metrics(old, items, "30d", now=NOW)
    assert empty.total_transactions == 0
    assert empty.top_used_items == []
    assert usage_metrics([], items, "all").total_transactions == 0


def test_top_lists_are_capped(make_item):
    many = [make_item(id=f"i{n}", item_name=f"Item {n:02d}") for n in range(15)]
    transactions = [txn(item.id, "dispensed", n + 1) for n, item in enumerate(many)]
    metrics = usage_metrics(transactions, many, "all", now=NOW)
    assert len(metrics.top_used_items) == 10
    assert metrics.top_used_items[0].name == "Item 14"


def test_naive_now_is_treated_as_utc():
    start = range_start("7d", datetime(2024, 6, 30, 12, 0))
    assert start.isoformat() == "2024-06-23T12:00:00+00:00"
    assert range_start("all") is None


def test_unknown_time_range():
    with pytest.raises(InvalidInputError):
        range_start("1y")

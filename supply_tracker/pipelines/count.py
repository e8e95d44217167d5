import logging
from datetime import datetime, timezone
from typing import Optional
import pandas as pd
from pydantic import ValidationError

from supply_tracker import data_handler, settings
from supply_tracker.errors import SupplyTrackerError
from supply_tracker.pipeline import DataPipeline
from supply_tracker.reconciliation import (
    aggregate_counts,
    apply_count,
    cash_variance,
    classify_cash_variance,
    parse_cash_amount,
)
from supply_tracker.schemas import ItemUpdate, TransactionRecord
from supply_tracker.transactions import cash_count_transaction, count_payloads

logger = logging.getLogger(__name__)


class CountPipeline(DataPipeline):
    """
    Reconciles a physical count sheet against the latest item snapshot and
    the cash in the box. Produces the item updates and transaction records
    for the count; the caller persists them.
    """

    def __init__(
        self,
        actual_cash,
        actor: str = "Unknown",
        notes: str = "",
        timestamp: Optional[datetime] = None,
        test_mode: bool = False,
    ):
        super().__init__("inventory_count", test_mode=test_mode)
        # Rejected here so a bad amount never reaches the calculator.
        self.actual_cash = parse_cash_amount(actual_cash)
        self.actor = actor
        self.notes = notes
        self.timestamp = timestamp or datetime.now(timezone.utc)
        self.item_updates: list[ItemUpdate] = []

    def extract(self) -> pd.DataFrame | None:
        logger.info("--- Loading Supply Items and Count Sheet ---")
        items = data_handler.load_snapshot(settings.ITEMS_FILENAME_PREFIX)
        counts = data_handler.load_snapshot(settings.COUNT_SHEET_FILENAME_PREFIX)
        self.status_summary["items_snapshot"] = items[1] if items else None
        self.status_summary["count_sheet"] = counts[1] if counts else None
        if items is None or counts is None:
            return None

        items_df, counts_df = items[0], counts[0]
        missing = {"$id", "actual_count"} - set(counts_df.columns)
        if missing:
            logger.error(f"❌ Count sheet is missing columns: {sorted(missing)}")
            return None

        # Blank rows on the sheet are items nobody counted.
        counts_df = counts_df[["$id", "actual_count"]].dropna(subset=["actual_count"])
        counts_df = counts_df[counts_df["actual_count"].str.strip() != ""]

        # One count per item; two rows for an item would be applied twice.
        duplicated = counts_df.loc[counts_df["$id"].duplicated(), "$id"]
        if not duplicated.empty:
            logger.error(
                f"❌ Count sheet lists items more than once: {sorted(set(duplicated))}"
            )
            return None

        merged = pd.merge(items_df, counts_df, on="$id", how="inner")
        unknown = set(counts_df["$id"]) - set(merged["$id"])
        if unknown:
            logger.warning(f"⚠️ Ignoring counts for unknown items: {sorted(unknown)}")
        return merged

    def transform(self, df: pd.DataFrame) -> list[TransactionRecord] | None:
        try:
            logger.info("Validating items against schema...")
            items = data_handler.validate_items(df.drop(columns=["actual_count"]))
            logger.info("✅ Data validation successful.")
        except ValidationError as e:
            logger.error("❌ Data validation failed!")
            logger.error(e)
            return None

        try:
            submissions = [
                apply_count(item, count)
                for item, count in zip(items, df["actual_count"].tolist())
            ]
            totals = aggregate_counts(submissions)
            variance = cash_variance(self.actual_cash, totals.total_expected_revenue)
            self.item_updates, records = count_payloads(
                submissions, self.actor, self.timestamp
            )
            records.append(
                cash_count_transaction(
                    submissions,
                    totals,
                    self.actual_cash,
                    self.actor,
                    self.timestamp,
                    self.notes,
                )
            )
        except SupplyTrackerError as e:
            logger.error(f"❌ Count rejected: {e}")
            return None

        status = classify_cash_variance(variance)
        self.status_summary.update(totals.model_dump())
        self.status_summary["actual_cash"] = self.actual_cash
        self.status_summary["cash_variance"] = round(variance, 2)
        self.status_summary["cash_status"] = status.value

        logger.info(f"Items Counted: {totals.items_counted}")
        logger.info(f"Items Sold: {totals.total_items_sold}")
        logger.info(f"Expected Revenue: ${totals.total_expected_revenue:.2f}")
        logger.info(f"Actual Cash: ${self.actual_cash:.2f}")
        logger.info(f"Cash Variance: ${variance:.2f} ({status.value})")
        logger.info(f"Shrinkage: {totals.total_shrinkage} items")
        logger.info(f"Overage: {totals.total_overage} items")
        return records

    def load(self, validated_data: list[TransactionRecord]):
        self.status_summary["item_updates"] = [
            {"item_id": update.item_id, **update.payload()} for update in self.item_updates
        ]
        super().load(validated_data)
        if self.item_updates:
            data_handler.save_outputs(self.item_updates, "inventory_count_item_updates")

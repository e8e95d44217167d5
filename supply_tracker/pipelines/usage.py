import logging
from datetime import datetime
from typing import Optional
import pandas as pd
from pydantic import ValidationError

from supply_tracker import data_handler, settings
from supply_tracker.pipeline import DataPipeline
from supply_tracker.schemas import InventoryItem, UsageMetrics
from supply_tracker.usage import range_start, usage_metrics

logger = logging.getLogger(__name__)


class UsagePipeline(DataPipeline):
    def __init__(
        self,
        time_range: str = "30d",
        now: Optional[datetime] = None,
        test_mode: bool = False,
    ):
        super().__init__("usage", test_mode=test_mode)
        range_start(time_range, now)  # rejects unknown ranges up front
        self.time_range = time_range
        self.now = now
        self.items: list[InventoryItem] = []
        self.items_df: Optional[pd.DataFrame] = None

    def extract(self) -> pd.DataFrame | None:
        logger.info("--- Loading Transactions and Supply Items ---")
        items = data_handler.load_snapshot(settings.ITEMS_FILENAME_PREFIX)
        transactions = data_handler.load_snapshot(settings.TRANSACTIONS_FILENAME_PREFIX)
        self.status_summary["items_snapshot"] = items[1] if items else None
        self.status_summary["transactions_snapshot"] = (
            transactions[1] if transactions else None
        )
        if transactions is None:
            return None
        # Without items the report still runs; names show as Unknown.
        self.items_df = items[0] if items else None
        return transactions[0]

    def transform(self, df: pd.DataFrame) -> list[UsageMetrics] | None:
        try:
            logger.info("Validating transactions and items against schema...")
            transactions = data_handler.validate_transactions(df)
            if self.items_df is not None:
                self.items = data_handler.validate_items(self.items_df)
            logger.info("✅ Data validation successful.")
        except ValidationError as e:
            logger.error("❌ Data validation failed!")
            logger.error(e)
            return None

        metrics = usage_metrics(transactions, self.items, self.time_range, self.now)
        self.status_summary["time_range"] = self.time_range
        self.status_summary["total_transactions"] = metrics.total_transactions
        logger.info(
            f"{metrics.total_transactions} transactions in range '{self.time_range}': "
            f"{metrics.total_items_dispensed} dispensed, "
            f"{metrics.total_items_received} received, "
            f"{metrics.total_shrinkage} lost."
        )
        return [metrics]

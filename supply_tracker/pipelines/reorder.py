import logging
from typing import Iterable, Optional
import pandas as pd
from pydantic import ValidationError

from supply_tracker import data_handler, settings
from supply_tracker.pipeline import DataPipeline
from supply_tracker.reorder import build_reorder_alerts, inventory_stats
from supply_tracker.schemas import Priority, ReorderAlert
from supply_tracker.shopping_list import build_shopping_list, estimated_total

logger = logging.getLogger(__name__)


class ReorderPipeline(DataPipeline):
    """
    Builds reorder alerts from the latest item snapshot and a shopping list
    for the alerts in the selected priorities.
    """

    def __init__(self, priorities: Optional[Iterable[str]] = None, test_mode: bool = False):
        super().__init__("reorder", test_mode=test_mode)
        names = priorities or settings.PRIORITY_ORDER
        self.priorities = [Priority(name) for name in names]
        self.shopping_list: Optional[str] = None

    def extract(self) -> pd.DataFrame | None:
        logger.info("--- Loading Supply Items ---")
        snapshot = data_handler.load_snapshot(settings.ITEMS_FILENAME_PREFIX)
        if snapshot is None:
            self.status_summary["items_snapshot"] = None
            return None
        df, snapshot_date = snapshot
        self.status_summary["items_snapshot"] = snapshot_date
        return df

    def transform(self, df: pd.DataFrame) -> list[ReorderAlert] | None:
        try:
            logger.info("Validating items against schema...")
            items = data_handler.validate_items(df)
            logger.info("✅ Data validation successful.")
        except ValidationError as e:
            logger.error("❌ Data validation failed!")
            logger.error(e)
            return None

        stats = inventory_stats(items)
        alerts = build_reorder_alerts(items)
        self.status_summary.update(stats.model_dump())
        for priority in Priority:
            count = sum(1 for alert in alerts if alert.priority == priority)
            self.status_summary[priority.value] = count
        logger.info(
            f"{stats.low_stock} of {stats.total} items need reordering "
            f"({stats.out_of_stock} out of stock)."
        )

        selected = [alert for alert in alerts if alert.priority in self.priorities]
        if selected:
            self.shopping_list = build_shopping_list(selected)
            self.status_summary["selected"] = len(selected)
            self.status_summary["estimated_total"] = round(estimated_total(selected), 2)
        else:
            logger.info("No alerts in the selected priorities. Skipping shopping list.")
        return alerts

    def load(self, validated_data: list[ReorderAlert]):
        super().load(validated_data)
        if self.shopping_list:
            data_handler.save_text(self.shopping_list, "shopping_list")

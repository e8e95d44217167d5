import logging
from abc import ABC, abstractmethod
from typing import Any, Optional
import pandas as pd
from pydantic import BaseModel

from . import data_handler

logger = logging.getLogger(__name__)


class DataPipeline(ABC):
    """
    Abstract base class for the report pipelines (reorder, count, usage).
    Follows an Extract -> Transform -> Load (ETL) pattern over database snapshots.
    """

    def __init__(self, report_type: str, test_mode: bool = False):
        self.report_type = report_type
        self.test_mode = test_mode
        # Snapshot date per source plus any run results worth reporting
        self.status_summary: dict[str, Any] = {}

    def run(self) -> Optional[list[BaseModel]]:
        """
        Orchestrates the pipeline execution. Returns the loaded records, or
        None when the run was aborted.
        """
        logger.info(f"🚀 STEP: {self.report_type.upper()} REPORT")
        logger.info("-" * 30)

        # --- 1. EXTRACT ---
        raw_data = self.extract()
        if raw_data is None or raw_data.empty:
            logger.warning(f"⚠️ No data extracted for {self.report_type}. Nothing to do.")
            return None

        # --- 2. TRANSFORM ---
        validated_data = self.transform(raw_data)
        if validated_data is None:
            logger.error(f"❌ Transformation failed for {self.report_type}.")
            return None

        # --- 3. LOAD ---
        self.load(validated_data)

        logger.info(f"✅ {self.report_type.capitalize()} Pipeline Finished.\n")
        logger.info("=" * 60)
        return validated_data

    @abstractmethod
    def extract(self) -> pd.DataFrame | None:
        """
        Finds the latest snapshots and returns them as one DataFrame.
        Should also record snapshot dates in self.status_summary.
        """
        pass

    @abstractmethod
    def transform(self, df: pd.DataFrame) -> list[Any] | None:
        """
        Validates rows against the schemas and runs the computation.
        Returns a list of Pydantic models, or None if the input was rejected.
        """
        pass

    def load(self, validated_data: list[Any]):
        """
        Saves data to disk and posts to webhook.
        """
        if self.status_summary:
            logger.info("\n--- Final Status Summary ---")
            for key, value in self.status_summary.items():
                logger.info(f"{key}: {value if value is not None else 'No data'}")

        if validated_data:
            data_handler.save_outputs(validated_data, f"{self.report_type}_report")
        else:
            logger.warning("No data to save to disk.")

        if not self.test_mode:
            data_handler.post_to_webhook(
                validated_data=validated_data,
                metadata=self.status_summary,
                report_type=self.report_type,
            )
        else:
            logger.info("🧪 Test Mode: Skipping webhook post.")

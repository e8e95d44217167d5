import json
import logging
from datetime import date
from typing import Any, Optional, Sequence

import pandas as pd
import requests
from pydantic import BaseModel

from . import settings
from . import utils
from .schemas import InventoryItem, TransactionRecord

logger = logging.getLogger(__name__)

# Read as text so ids and SKUs like "00123" keep their leading zeros and
# hand-entered counts reach the count validation unparsed.
TEXT_COLUMNS = {
    "$id": str,
    "supply_item_id": str,
    "item_name": str,
    "category": str,
    "unit": str,
    "supplier": str,
    "supplier_sku": str,
    "performed_by": str,
    "notes": str,
    "actual_count": str,
}


def load_snapshot(prefix: str) -> tuple[pd.DataFrame, date] | None:
    """Loads the newest snapshot for a collection, with the date it was taken."""
    found = utils.find_latest_report(settings.INPUT_DIR, prefix)
    if not found:
        logger.warning(f"  > ⚠️  No snapshot found with prefix '{prefix}'.")
        return None

    path, snapshot_date = found
    logger.info(f"  > Found: {path.name} (Snapshot Date: {snapshot_date})")
    df = utils.load_csv(path, dtype=TEXT_COLUMNS)
    if df is None:
        return None
    return df, snapshot_date


def frame_to_records(df: pd.DataFrame) -> list[dict[str, Any]]:
    """
    Converts DataFrame rows to dicts, dropping empty cells so the schema
    defaults apply instead of NaN.
    """
    cleaned = df.astype(object).where(df.notna(), None)
    return [
        {key: value for key, value in row.items() if value is not None}
        for row in cleaned.to_dict("records")
    ]


def validate_items(df: pd.DataFrame) -> list[InventoryItem]:
    """Raises pydantic.ValidationError on the first malformed row."""
    return [InventoryItem(**row) for row in frame_to_records(df)]


def validate_transactions(df: pd.DataFrame) -> list[TransactionRecord]:
    return [TransactionRecord(**row) for row in frame_to_records(df)]


def save_outputs(validated_data: Sequence[BaseModel], base_name: str):
    """Saves records to a flattened CSV and conditionally to JSON, with dated filenames."""
    settings.OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    date_suffix = utils.get_date_suffix_for_filename()

    csv_path = settings.OUTPUT_DIR / f"{base_name}_{date_suffix}.csv"
    json_path = settings.OUTPUT_DIR / f"{base_name}_{date_suffix}.json"

    json_data = [item.model_dump(mode="json", by_alias=True) for item in validated_data]

    # Nested records (e.g. an alert's item) become dotted columns.
    pd.json_normalize(json_data).to_csv(csv_path, index=False)
    logger.info(f"✅ {base_name} saved to: {csv_path}")

    if settings.SAVE_JSON_OUTPUT:
        with open(json_path, "w", encoding="utf-8") as f:
            json.dump(json_data, f, indent=2, ensure_ascii=False)
        logger.info(f"✅ JSON output saved to: {json_path}")
    else:
        logger.info("Skipping JSON file save as per configuration.")


def save_text(text: str, base_name: str):
    settings.OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
    date_suffix = utils.get_date_suffix_for_filename()
    txt_path = settings.OUTPUT_DIR / f"{base_name}_{date_suffix}.txt"
    txt_path.write_text(text, encoding="utf-8")
    logger.info(f"✅ {base_name} saved to: {txt_path}")
    return txt_path


def post_to_webhook(
    validated_data: Sequence[BaseModel],
    metadata: Optional[dict[str, Any]] = None,
    report_type: str = "report",
):
    """
    Posts the validated records and run metadata to the webhook.
    """
    if not settings.WEBHOOK_URL:
        logger.warning("⚠️ WEBHOOK_URL not set. Skipping webhook post.")
        return

    logger.info(f"🚀 Posting {report_type} data to webhook: {settings.WEBHOOK_URL}")

    payload = {
        "reportType": report_type,
        "reportData": [
            item.model_dump(mode="json", by_alias=True) for item in validated_data
        ],
        "metadata": json.loads(json.dumps(metadata or {}, default=str)),
    }

    try:
        response = requests.post(
            settings.WEBHOOK_URL, json=payload, timeout=settings.WEBHOOK_TIMEOUT
        )
        response.raise_for_status()
        logger.info("✅ Data successfully posted to webhook.")
    except requests.exceptions.RequestException as e:
        logger.error(f"❌ Error posting to webhook: {e}")

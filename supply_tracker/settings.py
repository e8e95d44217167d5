import os
from pathlib import Path
from dotenv import load_dotenv

# --- Base Directory ---
BASE_DIR = Path(__file__).resolve().parent.parent

# --- Load Environment Variables ---
load_dotenv(BASE_DIR / ".env")

# --- Path Configuration ---
INPUT_DIR = BASE_DIR / os.getenv("INPUT_DIR", "input")
OUTPUT_DIR = BASE_DIR / os.getenv("OUTPUT_DIR", "output")
LOG_DIR = BASE_DIR / os.getenv("LOG_DIR", "logs")

# --- Snapshot Filename Configuration ---
# Snapshots are CSV exports of the database collections, named <prefix>YYYY-MM-DD.csv
ITEMS_FILENAME_PREFIX = os.getenv("ITEMS_FILENAME_PREFIX", "supply_items_")
COUNT_SHEET_FILENAME_PREFIX = os.getenv("COUNT_SHEET_FILENAME_PREFIX", "count_sheet_")
TRANSACTIONS_FILENAME_PREFIX = os.getenv(
    "TRANSACTIONS_FILENAME_PREFIX", "supply_transactions_"
)
SNAPSHOT_DATE_FORMAT = "%Y-%m-%d"

# --- Outputs ---
SAVE_JSON_OUTPUT = os.getenv("SAVE_JSON_OUTPUT", "true").lower() in ("1", "true", "yes")
WEBHOOK_URL = os.getenv("WEBHOOK_URL")
WEBHOOK_TIMEOUT = int(os.getenv("WEBHOOK_TIMEOUT", "15"))

# --- Shared Business Logic ---
# Items at or below this fraction of their reorder point are urgent.
URGENT_RATIO = float(os.getenv("URGENT_RATIO", "0.5"))

SHOPPING_LIST_TITLE = os.getenv(
    "SHOPPING_LIST_TITLE", "Office Supplies - Reorder List"
)

# Display order for reorder buckets.
PRIORITY_ORDER = [
    "critical",
    "urgent",
    "low",
]

PRIORITY_EMOJI = {
    "critical": "🔴",
    "urgent": "🟠",
    "low": "🟡",
}

# Lookback windows for the usage report, in days. None means all time.
USAGE_TIME_RANGES = {
    "7d": 7,
    "30d": 30,
    "90d": 90,
    "all": None,
}

USAGE_TOP_N = 10

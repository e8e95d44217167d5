import logging
from datetime import date, datetime
from pathlib import Path
import pandas as pd

from . import settings

logger = logging.getLogger(__name__)


def get_date_suffix_for_filename() -> str:
    """Returns the current date as a YYYY-MM-DD string for filenames."""
    return datetime.now().strftime(settings.SNAPSHOT_DATE_FORMAT)


def find_latest_report(directory: Path, prefix: str) -> tuple[Path, date] | None:
    """
    Finds the newest '<prefix>YYYY-MM-DD.csv' snapshot in a directory.
    Files whose suffix is not a date are ignored.
    """
    latest = None
    for path in Path(directory).glob(f"{prefix}*.csv"):
        suffix = path.stem[len(prefix):]
        try:
            report_date = datetime.strptime(suffix, settings.SNAPSHOT_DATE_FORMAT).date()
        except ValueError:
            logger.debug(f"Ignoring {path.name}: '{suffix}' is not a snapshot date.")
            continue
        if latest is None or report_date > latest[1]:
            latest = (path, report_date)
    return latest


def load_csv(
    file_path: Path, skiprows: int = 0, dtype: dict | None = None
) -> pd.DataFrame | None:
    """
    CSV loader with an encoding fallback.
    It will attempt to read a file in the following order:
    1. UTF-8 with BOM support ('utf-8-sig').
    2. Latin-1, which can read any byte but might misinterpret characters.
    """
    try:
        return pd.read_csv(file_path, encoding="utf-8-sig", skiprows=skiprows, dtype=dtype)

    except UnicodeDecodeError:
        logger.info(
            f"UTF-8 decoding failed for {file_path.name}. Retrying with 'latin-1'."
        )
        try:
            return pd.read_csv(file_path, encoding="latin-1", skiprows=skiprows, dtype=dtype)
        except Exception as e_latin1:
            logger.error(
                f"Could not read {file_path.name} even with latin-1. Reason: {e_latin1}"
            )
            return None

    except FileNotFoundError:
        logger.info(f"Snapshot not found at {file_path}, skipping.")
        return None

    except Exception as e_general:
        logger.error(
            f"An unexpected error occurred while reading {file_path.name}. Reason: {e_general}"
        )
        return None

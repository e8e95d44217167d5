import logging
import sys
from logging.handlers import RotatingFileHandler
from . import settings


def setup_logger(
    name: str = "supply_tracker",
    log_level: int = logging.INFO,
    log_to_file: bool = True,
) -> logging.Logger:
    """
    Configures the package logger: terse console output for whoever runs the
    report, plus a rotating file under LOG_DIR with timestamps for later audits.
    """
    logger = logging.getLogger(name)
    logger.setLevel(log_level)

    # Already configured by an earlier run in this process
    if logger.handlers:
        return logger

    # Debug runs show which module logged each line.
    if log_level <= logging.DEBUG:
        console_format = logging.Formatter("%(name)s: %(message)s")
    else:
        console_format = logging.Formatter("%(message)s")

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(console_format)
    logger.addHandler(console_handler)

    if log_to_file:
        settings.LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            settings.LOG_DIR / "supply_tracker.log",
            maxBytes=5 * 1024 * 1024,  # 5 MB
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setLevel(log_level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )
        logger.addHandler(file_handler)

    return logger

"""Logger factory that writes to both console and a dated log file.

Library code (the competency package) only calls logging.getLogger(__name__);
handlers are attached here, by the entry points.
"""

import logging
import os
from pathlib import Path
from datetime import datetime


def get_log_dir() -> Path:
    """Directory for log files (MINI_MENTOR_LOG_DIR or <project>/logs)."""
    override = os.environ.get("MINI_MENTOR_LOG_DIR")
    if override:
        return Path(override)
    return Path(__file__).parent.parent / "logs"


def configure_logger(logger_name: str, channel: str = "mentor") -> logging.Logger:
    """
    Attach console and file handlers to an existing logger hierarchy.

    Args:
        logger_name: Full logger name, e.g. "competency" for the whole package
        channel: Log channel; names the log file (logs/<channel>_YYYY-MM-DD.log)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)

    # Don't add handlers if they already exist (prevents duplicate logs)
    if logger.handlers:
        return logger

    logger.setLevel(logging.DEBUG)

    log_dir = get_log_dir()
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        # Without a logs directory we still log to the console
        print(f"⚠ Warning: Could not create logs directory {log_dir}: {e}")

    if log_dir.exists():
        date_str = datetime.now().strftime("%Y-%m-%d")
        log_file = log_dir / f"{channel}_{date_str}.log"

        try:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setLevel(logging.DEBUG)
            file_formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S"
            )
            file_handler.setFormatter(file_formatter)
            logger.addHandler(file_handler)
            logger.debug(f"Log file handler created: {log_file}")
        except OSError as e:
            print(f"⚠ Warning: Could not create log file {log_file}: {e}")

    # Console handler - only shows INFO and above
    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_formatter = logging.Formatter(
        "%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S"
    )
    console_handler.setFormatter(console_formatter)
    logger.addHandler(console_handler)

    # Prevent propagation to root logger (avoids duplicate logs)
    logger.propagate = False

    return logger


def get_logger(name: str, channel: str = "mentor") -> logging.Logger:
    """Get a logger that logs to both console and file, named "<channel>.<name>"."""
    return configure_logger(f"{channel}.{name}", channel)


def get_db_logger(name: str = "database") -> logging.Logger:
    """Logger for the database layer (logs/database_YYYY-MM-DD.log)."""
    return get_logger(name, channel="database")

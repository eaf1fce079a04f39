"""
Centralized logging configuration.

Console output always goes to stdout at the configured level. With
LOG_TO_FILE enabled, a daily file under logs/ additionally captures
everything at DEBUG. Chat-path log lines carry `request_id=...` so a
client-visible `requestId` can be traced to the provider error behind it.
"""
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that emit a line per HTTP round trip
QUIET_LOGGERS = ("httpx", "httpcore", "groq")

DEFAULT_LOG_DIR = Path(__file__).parent.parent.parent / "logs"

# Handlers are installed once per process
_logging_configured = False


def setup_logging(
    log_level: str = "DEBUG",
    log_dir: Optional[Path] = None,
    log_to_file: bool = True,
) -> logging.Logger:
    """
    Configure the root logger.

    Called from create_app(); later calls (one per app built in tests)
    return the already configured root logger unchanged.

    Args:
        log_level: Console level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_dir: Directory for the daily log file (default: logs/ at the repo root)
        log_to_file: Install the file handler

    Returns:
        The root logger

    Example:
        >>> setup_logging("INFO", log_to_file=False).info("Application started")
    """
    global _logging_configured

    root_logger = logging.getLogger()
    if _logging_configured:
        return root_logger

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    handlers: List[logging.Handler] = [
        _handler(logging.StreamHandler(sys.stdout), formatter, log_level)
    ]
    log_file = None
    if log_to_file:
        log_file = _daily_log_file(log_dir or DEFAULT_LOG_DIR)
        handlers.append(
            _handler(logging.FileHandler(log_file, encoding="utf-8"), formatter, "DEBUG")
        )

    root_logger.setLevel(logging.DEBUG)
    for handler in handlers:
        root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _logging_configured = True
    root_logger.debug(f"Logging configured: level={log_level}, file={log_file}")
    return root_logger


def _handler(handler: logging.Handler, formatter: logging.Formatter, level: str) -> logging.Handler:
    handler.setFormatter(formatter)
    handler.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler


def _daily_log_file(log_dir: Path) -> Path:
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir / f"app_{datetime.now().strftime('%Y%m%d')}.log"


def get_logger(name: str) -> logging.Logger:
    """
    Get a module logger; pass __name__ so names follow the package tree.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Knowledge loaded")
        2025-01-15 10:30:45 | INFO     | omanx.knowledge.store:197 | Knowledge loaded
    """
    return logging.getLogger(name)

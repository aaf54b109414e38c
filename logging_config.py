"""
Centralized logging configuration for Quick Order.

Every record carries the name of the thread that produced it. Three threads
touch the order history (the request thread, the submission thread and the
status scheduler), so the thread name is the quickest way to tell which one
wrote a given entry.

Log Format:
    2026-10-19 10:15:30 [INFO    ] [MainThread] quick_order.app - Starting Quick Order
    2026-10-19 10:15:32 [INFO    ] [Submit-17292] quick_order.order.17292 - Order recorded
    2026-10-19 10:16:00 [DEBUG   ] [StatusScheduler] quick_order.services.status_scheduler - Tick

Usage:
    from logging_config import setup_logging, get_logger

    setup_logging(log_level=logging.INFO, enable_file_logging=False)
    logger = get_logger(__name__)
"""

import logging
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional


APP_LOGGER_NAME = "quick_order"


class ThreadContextFilter(logging.Filter):
    """
    Logging filter that stamps thread context onto every record.

    Adds ``thread_name`` and ``thread_id`` attributes used by the format
    string. Never drops a record.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        current_thread = threading.current_thread()
        record.thread_name = current_thread.name
        record.thread_id = threading.get_ident()
        return True


def _rotating_handler(
    path: Path,
    level: int,
    formatter: logging.Formatter,
    thread_filter: logging.Filter,
) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        filename=path,
        maxBytes=5 * 1024 * 1024,  # 5 MB per file
        backupCount=3,
        encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(thread_filter)
    return handler


def setup_logging(
    app_name: str = APP_LOGGER_NAME,
    log_level: int = logging.INFO,
    log_dir: Optional[Path] = None,
    enable_file_logging: bool = False,
) -> logging.Logger:
    """
    Configure the application logger tree.

    Installs a console handler and, when ``enable_file_logging`` is set, a
    rotating application log plus a rotating error-only log. Calling it again
    replaces the previous handlers.

    Args:
        app_name: Name of the application root logger
        log_level: Minimum log level
        log_dir: Directory for log files (default: ./logs next to this file)
        enable_file_logging: Whether to write log files

    Returns:
        The configured application root logger
    """
    logger = logging.getLogger(app_name)
    logger.setLevel(log_level)
    logger.propagate = False
    logger.handlers.clear()

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)-8s] [%(thread_name)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    thread_filter = ThreadContextFilter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(thread_filter)
    logger.addHandler(console_handler)

    if enable_file_logging:
        if log_dir is None:
            log_dir = Path(__file__).parent / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)

        app_log_file = log_dir / f"{app_name}.log"
        logger.addHandler(
            _rotating_handler(app_log_file, log_level, formatter, thread_filter)
        )
        logger.addHandler(
            _rotating_handler(
                log_dir / f"{app_name}_error.log", logging.ERROR, formatter, thread_filter
            )
        )
        logger.info(f"File logging enabled: {app_log_file}")

    logger.info(f"Logging configured at level {logging.getLevelName(log_level)}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a module logger under the application namespace.

    ``get_logger("services.history_store")`` returns the logger named
    ``quick_order.services.history_store``.
    """
    if not name.startswith(APP_LOGGER_NAME):
        name = f"{APP_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def get_order_logger(order_id: str) -> logging.Logger:
    """
    Get a logger for one order submission.

    Uses the last 8 characters of the id; order ids are millisecond
    timestamps, so the tail is the part that differs between orders.
    """
    short_id = order_id[-8:] if len(order_id) >= 8 else order_id
    return logging.getLogger(f"{APP_LOGGER_NAME}.order.{short_id}")


def set_thread_name(name: str) -> None:
    """Rename the current thread; the name shows up in the [thread] field."""
    threading.current_thread().name = name

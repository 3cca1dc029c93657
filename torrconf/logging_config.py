"""Logging configuration for torrconf.

Console output goes through Rich; JSON lines are available for hosts that
collect structured logs, and a timestamped file can be added on top.
"""

from __future__ import annotations

import json
import logging
import logging.config
import random
import string
import sys
import time
from datetime import datetime
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

from torrconf.models import LoggingOptions

PACKAGE_LOGGER = "torrconf"

# Level of the package logger before EnableDebug raised it; None while debug is off
_level_before_debug: int | None = None


class StructuredFormatter(logging.Formatter):
    """Structured JSON formatter for logs."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON."""
        log_entry: dict[str, Any] = {
            "timestamp": time.time(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def create_rich_handler(
    console: Console | None = None,
    level: int | str = logging.NOTSET,
    show_path: bool = False,
    rich_tracebacks: bool = True,
) -> logging.Handler:
    """Create the console handler used by setup_logging.

    Markup stays off: settings records are JSON and bucket paths may hold
    brackets.
    """
    if console is None:
        console = Console(file=sys.stderr)
    return RichHandler(
        console=console,
        level=level,
        show_path=show_path,
        rich_tracebacks=rich_tracebacks,
        markup=False,
    )


def _generate_timestamped_log_filename(base_path: str) -> str:
    """Generate a unique timestamped log file name.

    Format: torrconf-YYYYMMDD-HHMMSS-<random>.log
    """
    base_path_obj = Path(base_path)
    base_dir = base_path_obj if base_path_obj.is_dir() else base_path_obj.parent
    base_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    random_suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=4))
    return str(base_dir / f"torrconf-{timestamp}-{random_suffix}.log")


def setup_logging(options: LoggingOptions) -> str | None:
    """Configure the ``torrconf`` logger.

    The level lives on the logger only; handlers pass every record the
    logger lets through.

    Returns:
        Path of the log file in use, if any.

    """
    global _level_before_debug

    level = options.log_level.value
    logging_config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "structured": {
                "()": StructuredFormatter,
            },
            "simple": {
                "format": options.log_format,
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
        },
        "handlers": {},
        "loggers": {
            PACKAGE_LOGGER: {
                "level": level,
                "handlers": [],
                "propagate": False,
            },
        },
    }

    if options.structured_logging:
        logging_config["handlers"]["console"] = {
            "class": "logging.StreamHandler",
            "formatter": "structured",
            "stream": sys.stderr,
        }
        logging_config["loggers"][PACKAGE_LOGGER]["handlers"].append("console")

    actual_log_file = None
    if options.log_file:
        actual_log_file = _generate_timestamped_log_filename(options.log_file)
        logging_config["handlers"]["file"] = {
            "class": "logging.FileHandler",
            "formatter": "structured" if options.structured_logging else "simple",
            "filename": actual_log_file,
            "encoding": "utf-8",
        }
        logging_config["loggers"][PACKAGE_LOGGER]["handlers"].append("file")

    logging.config.dictConfig(logging_config)

    if not options.structured_logging:
        # RichHandler needs a live Console, so it is attached after dictConfig
        logging.getLogger(PACKAGE_LOGGER).addHandler(create_rich_handler())

    _level_before_debug = None
    return actual_log_file


def set_debug_logging(enabled: bool) -> None:
    """Follow the EnableDebug flag of the settings record.

    Enabling lowers the ``torrconf`` logger to DEBUG; disabling restores the
    level it had before, whoever set it.
    """
    global _level_before_debug

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if enabled:
        if _level_before_debug is None:
            _level_before_debug = package_logger.level
        package_logger.setLevel(logging.DEBUG)
    elif _level_before_debug is not None:
        package_logger.setLevel(_level_before_debug)
        _level_before_debug = None


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the package namespace."""
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")

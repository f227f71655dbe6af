"""
Logging setup for Slug Guard.

Everything logs under the "slug_guard" logger. Slug lifecycle records carry
a ``slug_event`` extra:

- "regenerate" (DEBUG, synchronizer): a speculative slug was derived
- "rollback" (INFO, synchronizer): a speculative slug was restored
- "conflict" (WARNING, store): the unique slug index rejected a write

The synchronizer logger can run at its own level (``slug_level``), so slug
events can be traced without turning on DEBUG for persistence as well.
"""

from __future__ import annotations

import json
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.logging import RichHandler


# Log output goes to stderr so command output stays clean
console = Console(stderr=True)

logger = logging.getLogger("slug_guard")
slug_logger = logging.getLogger("slug_guard.core.synchronizer")

# LogRecord extras copied into JSON output when present
SLUG_EXTRAS = ("slug_event", "entity_id", "field", "previous", "current")


def _level(name: str | None, default: int) -> int:
    if not name:
        return default
    return getattr(logging, name.upper(), default)


def setup_logging(
    level: str = "INFO",
    log_file: Path | str | None = None,
    format_style: str = "rich",
    max_file_size_mb: int = 10,
    backup_count: int = 3,
    slug_level: str | None = None,
) -> None:
    """
    Configure the slug_guard loggers.

    Calling again replaces (and closes) the handlers of the previous call.

    Args:
        level: Level for the package (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to a rotating log file
        format_style: "rich", "json", or "simple"
        max_file_size_mb: Max log file size before rotation
        backup_count: Number of rotated files to keep
        slug_level: Level for slug lifecycle events (None follows level)
    """
    log_level = _level(level, logging.INFO)
    event_level = _level(slug_level, log_level)

    for existing in list(logger.handlers):
        logger.removeHandler(existing)
        existing.close()
    logger.setLevel(log_level)
    slug_logger.setLevel(event_level if slug_level else logging.NOTSET)

    # Handlers see records from both loggers
    handler_level = min(log_level, event_level)

    handler: logging.Handler
    if format_style == "rich":
        handler = RichHandler(
            console=console,
            rich_tracebacks=True,
            show_time=True,
            show_path=False,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
    elif format_style == "json":
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JsonFormatter())
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
    handler.setLevel(handler_level)
    logger.addHandler(handler)

    if log_file:
        file_path = Path(log_file)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = RotatingFileHandler(
            file_path,
            maxBytes=max_file_size_mb * 1024 * 1024,
            backupCount=backup_count,
        )
        file_handler.setLevel(handler_level)
        # One JSON object per line
        file_handler.setFormatter(JsonFormatter())
        logger.addHandler(file_handler)


class JsonFormatter(logging.Formatter):
    """One JSON object per record, including slug event extras."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        for key in SLUG_EXTRAS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)

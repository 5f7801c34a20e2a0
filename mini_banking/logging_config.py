"""
Structured Logging Configuration Module

Ledger operations log one line per outcome. In JSON mode each line carries
the operation (``action``), the account it touched (``resource``) and any
amounts or balances (``extra``) as separate keys.
"""

import logging
import json
from datetime import datetime, timezone
from typing import Optional


TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# LogRecord attributes set by log_action, in output order
STRUCTURED_FIELDS = ("action", "resource", "extra")


class JSONFormatter(logging.Formatter):
    """Render each record as a single JSON object"""

    def format(self, record):
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.module,
            "message": record.getMessage(),
        }
        for field in STRUCTURED_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                entry[field] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def setup_logging(level: str = "INFO", logger_name: str = "mini_banking",
                  fmt: str = "json") -> logging.Logger:
    """
    Install a single stream handler on the package logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        logger_name: Logger to configure
        fmt: "json" for structured output, "text" for plain lines

    Returns:
        Configured logger
    """
    logger = logging.getLogger(logger_name)
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(TEXT_FORMAT) if fmt == "text" else JSONFormatter())

    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper()))
    logger.propagate = False
    return logger


def get_logger(name: str = "mini_banking") -> logging.Logger:
    return logging.getLogger(name)


def log_action(logger: logging.Logger, level: str, message: str,
               action: Optional[str] = None, resource: Optional[str] = None,
               extra: Optional[dict] = None):
    """
    Log a ledger operation with its structured fields.

    Fields left as None are not attached to the record.
    """
    fields = dict(zip(STRUCTURED_FIELDS, (action, resource, extra)))
    logger.log(
        getattr(logging, level.upper()),
        message,
        extra={k: v for k, v in fields.items() if v is not None},
    )

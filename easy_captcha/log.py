"""Logging setup for the CLI and the HTTP service.

Library modules only call ``logging.getLogger(__name__)``; handlers are
attached here, once, by whichever entry point is running.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

from .constants import LOG_FILE_NAME

LOGGER_NAME = "easy_captcha"
LOG_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] [trace=%(trace_id)s] %(message)s"

logger = logging.getLogger(LOGGER_NAME)


# Make sure every record has a trace_id so the formatter never fails, even
# for records that were not logged through a LoggerAdapter.
class TraceFilter(logging.Filter):
    def filter(self, record):
        if not hasattr(record, "trace_id"):
            record.trace_id = "-"
        return True


def configure_logging(log_dir: Optional[str] = None, level: str = "INFO") -> logging.Logger:
    """Attach console and (optionally) rotating file handlers to the package logger.

    Calling it again replaces the previously installed handlers.
    """
    for handler in list(logger.handlers):
        if getattr(handler, "_easy_captcha", False):
            logger.removeHandler(handler)
            handler.close()

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    formatter = logging.Formatter(LOG_FORMAT)

    handlers = []
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        # Rotate to avoid uncontrolled log growth
        handlers.append(
            RotatingFileHandler(
                os.path.join(log_dir, LOG_FILE_NAME),
                maxBytes=5 * 1024 * 1024,
                backupCount=5,
                encoding="utf-8",
            )
        )
    handlers.append(logging.StreamHandler())

    for handler in handlers:
        handler.setFormatter(formatter)
        handler.addFilter(TraceFilter())
        handler._easy_captcha = True
        logger.addHandler(handler)

    return logger


def get_trace_logger(trace_id: Optional[str], base: Optional[logging.Logger] = None):
    """Return a LoggerAdapter that attaches a trace_id to each LogRecord.

    Use this where a captcha id (or other correlation id) is known so that
    every message of one generation or request can be correlated.
    """
    return logging.LoggerAdapter(base or logger, {"trace_id": trace_id if trace_id else "-"})

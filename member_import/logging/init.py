from __future__ import annotations

import logging
import sys

"""Console logging for the importer.

Lines go to stdout as `LABEL message`; the labels are INFO, WARN, ERROR and
SUMMARY, so a run can be grepped or piped. Modules use
`logging.getLogger(__name__)` and reach the single handler installed on the
`member_import` package logger.
"""

__all__ = [
    "setup_logging",
    "log_summary",
    "reset_logging",
    "LOGGER_NAME",
    "SUMMARY_LEVEL",
]

LOGGER_NAME = "member_import"

# sits between INFO (20) and WARNING (30)
SUMMARY_LEVEL = 25

LEVEL_LABELS = {
    logging.DEBUG: "DEBUG",
    logging.INFO: "INFO",
    SUMMARY_LEVEL: "SUMMARY",
    logging.WARNING: "WARN",
    logging.ERROR: "ERROR",
    logging.CRITICAL: "CRITICAL",
}

_logger: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        return f"{LEVEL_LABELS.get(record.levelno, record.levelname)} {record.getMessage()}"


def _apply_level(logger: logging.Logger, debug: bool) -> None:
    level = logging.DEBUG if debug else logging.INFO
    logger.setLevel(level)
    for h in logger.handlers:
        h.setLevel(level)


def setup_logging(debug: bool = False) -> logging.Logger:
    """Install the stdout handler once; later calls only change the level."""
    global _logger

    if _logger is None:
        logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
        logger = logging.getLogger(LOGGER_NAME)
        for h in logger.handlers[:]:
            logger.removeHandler(h)
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(LabeledFormatter())
        logger.addHandler(handler)
        logger.propagate = False
        _logger = logger

    _apply_level(_logger, debug)
    return _logger


def log_summary(message: str) -> None:
    """Emit `SUMMARY message`; configures logging at INFO if nobody did."""
    (_logger or setup_logging()).log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Drop the handler so the next setup_logging() binds the current stdout."""
    global _logger
    if _logger is not None:
        for h in _logger.handlers[:]:
            _logger.removeHandler(h)
    _logger = None

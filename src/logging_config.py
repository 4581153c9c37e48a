"""
Logging for GlideType.

Everything logs through module loggers under the `src` namespace, so one
call to setup_logging() decides where recognition diagnostics end up.
Per-swipe timing and candidate breakdowns are logged at DEBUG.
"""
import logging
import sys
from typing import Optional, Union

LOGGER_NAME = "src"
LOG_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"


def resolve_level(level: Union[int, str]) -> int:
    """Level name or number to a logging level; unknown names give INFO."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(level: Union[int, str] = logging.INFO, log_file: Optional[str] = None) -> logging.Logger:
    """
    Route the package loggers to stdout and, optionally, a log file.

    Calling it again replaces the previous handlers, e.g. when --debug
    overrides the configured level.

    Args:
        level: Level number or name from the logging config ("DEBUG", "INFO", ...)
        log_file: Also write to this file, truncated on each run
    """
    numeric = resolve_level(level)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, mode='w', encoding='utf-8'))
    for handler in handlers:
        handler.setLevel(numeric)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    if isinstance(level, str) and logging.getLevelName(level.strip().upper()) != numeric:
        logger.warning("Unknown log level %r, using %s", level, logging.getLevelName(numeric))
    logger.debug("Logging at %s%s", logging.getLevelName(numeric),
                 f", copy in {log_file}" if log_file else "")
    return logger

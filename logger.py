# logger.py
import logging
from typing import Literal, Optional

# Logger level types
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

LOGGER_NAME = "calendar"
DEFAULT_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"


def setup_logger(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    log_format: Optional[str] = None,
    file_mode: Literal["w", "a"] = "a",
) -> logging.Logger:
    """
    Configure and return the calendar logger.

    Args:
        level: Logging level name (defaults to INFO)
        log_file: Log file path; ``None`` logs to stderr
        log_format: Log message format (defaults to the standard format)
        file_mode: File writing mode - 'w' for overwrite, 'a' for append

    Returns:
        Configured logging.Logger instance
    """
    level_map: dict[str, int] = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    numeric_level = level_map.get((level or "INFO").upper(), logging.INFO)

    handler: logging.Handler
    if log_file:
        handler = logging.FileHandler(log_file, mode=file_mode, encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(log_format or DEFAULT_FORMAT))

    calendar_logger = logging.getLogger(LOGGER_NAME)
    for existing in list(calendar_logger.handlers):
        calendar_logger.removeHandler(existing)
        existing.close()
    calendar_logger.addHandler(handler)
    calendar_logger.setLevel(numeric_level)
    return calendar_logger


def log(message: str, level: LogLevel = "DEBUG") -> None:
    """
    Log a message at the specified level.

    Args:
        message: The message to log
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    calendar_logger = logging.getLogger(LOGGER_NAME)
    match level.upper():
        case "INFO":
            calendar_logger.info(message)
        case "WARNING":
            calendar_logger.warning(message)
        case "ERROR":
            calendar_logger.error(message)
        case "CRITICAL":
            calendar_logger.critical(message)
        case _:
            calendar_logger.debug(message)

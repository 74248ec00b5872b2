"""
Logging service for EasyCrop.

Console output is always on; a dated log file is written under
~/.local/share/easycrop/logs/ unless disabled. The level can be given as a
logging constant or a name ("DEBUG", "info", ...) so it can come straight
from the config file.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Optional, Union

DEFAULT_LOG_DIR = Path.home() / ".local" / "share" / "easycrop" / "logs"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LogLevel = Union[int, str]

# Module-level flag to track if logging has been set up
_logging_initialized = False


def resolve_level(level: LogLevel) -> int:
    """Turn a level name or number into a logging constant (INFO if unknown)."""
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def setup_logging(
    log_level: LogLevel = logging.INFO,
    log_to_file: bool = True,
    log_dir: Optional[Path] = None,
) -> Optional[Path]:
    """
    Configure the root logger for EasyCrop.

    Args:
        log_level: Level constant or name.
        log_to_file: Whether to also log to a dated file.
        log_dir: Directory for log files. Defaults to DEFAULT_LOG_DIR.

    Returns:
        The log file path, or None when logging to console only. Calling it
        again after the first setup is a no-op and returns None.
    """
    global _logging_initialized

    if _logging_initialized:
        return None

    level = resolve_level(log_level)
    formatter = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    log_path = None
    if log_to_file:
        log_dir = log_dir or DEFAULT_LOG_DIR
        try:
            log_dir.mkdir(parents=True, exist_ok=True)
            log_path = log_dir / f"easycrop_{datetime.now().strftime('%Y%m%d')}.log"

            file_handler = logging.FileHandler(log_path, encoding="utf-8")
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            log_path = None
            root_logger.warning(f"Could not create log file: {e}. Logging to console only.")

    _logging_initialized = True
    return log_path


def set_log_level(log_level: LogLevel) -> int:
    """Change the level of the root logger and all of its handlers."""
    level = resolve_level(log_level)
    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers:
        handler.setLevel(level)
    return level


def reset_logging() -> None:
    """Close handlers and allow setup_logging() to run again."""
    global _logging_initialized

    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    _logging_initialized = False


def get_logger(name: str) -> logging.Logger:
    """Return the logger for a module; pass __name__."""
    return logging.getLogger(name)

"""Process-wide logging: an append-only log file plus console warnings."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List

LOGGER_NAME = "witchfile"
LOG_FILE_NAME = "witchfile.log"

FILE_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
CONSOLE_FORMAT = "[%(levelname)s] %(message)s"

_handlers: List[logging.Handler] = []


def log_file_path(config_dir: Path) -> Path:
    return config_dir / LOG_FILE_NAME


def setup_logging(config_dir: Path, level: str = "INFO", verbose: bool = False) -> Path:
    """Send package logs to ``witchfile.log`` and warnings to stderr.

    Calling it again replaces the handlers installed by the previous call.
    Returns the log file location.
    """
    close_logging()

    log_file = log_file_path(config_dir)
    file_level = logging.DEBUG if verbose else logging.getLevelName(level.upper())
    if not isinstance(file_level, int):
        file_level = logging.INFO

    # Delay opening so the file only appears once something is logged
    file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8", delay=True)
    file_handler.setLevel(file_level)
    file_handler.setFormatter(logging.Formatter(FILE_FORMAT))

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(min(file_level, logging.WARNING))
    logger.propagate = False
    for handler in (file_handler, console_handler):
        logger.addHandler(handler)
        _handlers.append(handler)

    return log_file


def close_logging() -> None:
    """Flush and detach the handlers installed by :func:`setup_logging`."""
    logger = logging.getLogger(LOGGER_NAME)
    while _handlers:
        handler = _handlers.pop()
        handler.flush()
        handler.close()
        logger.removeHandler(handler)


def show_log_file(config_dir: Path) -> str:
    """Return the log location followed by its contents, or a not-found note."""
    log_file = log_file_path(config_dir)
    if not log_file.exists():
        return f"No log file found: {log_file}"
    content = log_file.read_text(encoding="utf-8", errors="replace")
    return f"Log location: {log_file}\n{content}"


__all__ = ["LOGGER_NAME", "log_file_path", "setup_logging", "close_logging", "show_log_file"]

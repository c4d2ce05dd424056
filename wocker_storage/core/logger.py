"""Logging for wocker-storage: rich console output plus an optional log file.

All module loggers are children of the ``wocker_storage`` logger and carry no
level of their own, so verbosity is decided in one place.
"""
import logging
import tempfile
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

console = Console()

PACKAGE_LOGGER = "wocker_storage"
LOG_FILE_NAME = "wocker-storage.log"

_console_handler: Optional[RichHandler] = None
_file_handler: Optional[logging.FileHandler] = None


def _package_logger() -> logging.Logger:
    global _console_handler

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if _console_handler is None:
        _console_handler = RichHandler(console=console, show_path=False)
        _console_handler.setFormatter(logging.Formatter("%(message)s"))
        _console_handler.setLevel(logging.INFO)
        package_logger.addHandler(_console_handler)
        package_logger.setLevel(logging.INFO)
    return package_logger


def set_verbose(verbose: bool) -> None:
    """Switch the package logger (and console output) between INFO and DEBUG."""
    level = logging.DEBUG if verbose else logging.INFO
    _package_logger().setLevel(level)
    _console_handler.setLevel(level)


def setup_file_logging(log_file: str = None, verbose: bool = False) -> Path:
    """Send package logs to a file as well as the console.

    Calling it again replaces the previous file handler.

    Args:
        log_file: Path to log file (defaults to the system temp directory)
        verbose: Also write DEBUG records

    Returns:
        The path actually written to; falls back to the temp directory when
        the requested location cannot be created.
    """
    global _file_handler

    fallback = Path(tempfile.gettempdir()) / LOG_FILE_NAME
    target = Path(log_file) if log_file else fallback

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except PermissionError:
        target = fallback

    package_logger = _package_logger()
    if _file_handler is not None:
        package_logger.removeHandler(_file_handler)
        _file_handler.close()

    _file_handler = logging.FileHandler(target, encoding="utf-8")
    _file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    _file_handler.setFormatter(logging.Formatter(
        "%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    package_logger.addHandler(_file_handler)

    if verbose:
        package_logger.setLevel(logging.DEBUG)

    package_logger.info(f"Logging to {target}")
    return target


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the package logger.

    Names outside the package (e.g. ``__main__``) are nested under it so
    they share its handlers and level.
    """
    _package_logger()
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)

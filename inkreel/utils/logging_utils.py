"""
Logging setup for the player application.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

LOGGER_NAME = "inkreel"
LOG_FORMAT = "%(asctime)s %(levelname)-7s [%(name)s] %(message)s"


def resolve_log_level(debug_enabled: bool) -> int:
    return logging.DEBUG if debug_enabled else logging.INFO


def resolve_logs_dir() -> Path:
    """
    Directory for log files.

    ``INKREEL_LOG_DIR`` wins when set; otherwise the XDG state directory.
    """
    override = os.environ.get("INKREEL_LOG_DIR")
    if override:
        return Path(override).expanduser()
    state_home = Path(os.environ.get("XDG_STATE_HOME", Path.home() / ".local" / "state"))
    return state_home / "inkreel" / "logs"


def build_rotating_file_handler(
    log_dir: Path,
    filename: str = "inkreel.log",
    *,
    retention: int = 5,
    max_bytes: int = 512 * 1024,
    formatter: Optional[logging.Formatter] = None,
) -> logging.Handler:
    """
    Rotating file handler keeping ``retention`` files in total.

    Args:
        log_dir: Directory to write to; created when missing
        filename: Name of the active log file
        retention: Number of files kept, including the active one
        max_bytes: Size at which the file is rotated
        formatter: Optional formatter for the handler

    Returns:
        Configured handler
    """
    retention = max(1, retention)
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_dir / filename,
        maxBytes=max_bytes,
        backupCount=max(0, retention - 1),
        encoding="utf-8",
    )
    if formatter is not None:
        handler.setFormatter(formatter)
    return handler


def configure_logging(debug: bool = False, log_dir: Optional[Path] = None) -> logging.Logger:
    """
    Configure the ``inkreel`` logger hierarchy.

    Console output is always enabled; a rotating log file is added when
    ``log_dir`` is given. Calling it again replaces the handlers.

    Args:
        debug: Log at DEBUG instead of INFO
        log_dir: Directory for the rotating log file

    Returns:
        The package logger
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(resolve_log_level(debug))
    formatter = logging.Formatter(LOG_FORMAT)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setFormatter(formatter)
    logger.addHandler(console)

    if log_dir is not None:
        logger.addHandler(build_rotating_file_handler(Path(log_dir), formatter=formatter))

    logger.propagate = False
    return logger

"""
Log routing for sftp_fileops.

Every module logs under the "sftp_fileops" logger hierarchy. The root logger
belongs to the embedding application and is never touched here; the [logging]
config section only decides where this library's records go and how loud
paramiko's transport logger is.
"""

import logging
import sys
from pathlib import Path

from .config import LogConfig

PACKAGE_LOGGER = "sftp_fileops"
LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"

# Marks handlers installed by configure_logging so a later call can replace them
_OWNED = "_sftp_fileops_owned"


def _level(name: str, default: int) -> int:
    level = logging.getLevelName(name.upper())
    return level if isinstance(level, int) else default


def configure_logging(config: LogConfig) -> logging.Logger:
    """
    Route this library's log records according to config.

    Args:
        config: LogConfig from the [logging] section.

    Returns:
        The package logger.

    Note:
        Handlers added by an earlier call are closed and replaced, so
        building several clients from the same config does not duplicate
        output. With neither file nor console set, records propagate to
        whatever handlers the application installed.
    """
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    package_logger.setLevel(_level(config.level, logging.INFO))

    for handler in list(package_logger.handlers):
        if getattr(handler, _OWNED, False):
            package_logger.removeHandler(handler)
            handler.close()

    handlers: list[logging.Handler] = []
    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, mode="a", encoding="utf-8"))
    if config.console:
        handlers.append(logging.StreamHandler(sys.stderr))

    formatter = logging.Formatter(LOG_FORMAT)
    for handler in handlers:
        setattr(handler, _OWNED, True)
        handler.setFormatter(formatter)
        package_logger.addHandler(handler)

    # Records written by our own handlers must not be printed again via root
    package_logger.propagate = not handlers

    logging.getLogger("paramiko").setLevel(_level(config.paramiko_level, logging.WARNING))
    return package_logger

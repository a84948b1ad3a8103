"""Logging setup for fixture-generating scripts."""

import logging
import sys

PACKAGE_LOGGER = "docker_archive"

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(level: str = "INFO") -> logging.Logger:
    """Send ``docker_archive`` log records to stdout at ``level``.

    Only the package logger is configured; the root logger is left to the
    application. Calling this again changes the level without adding a
    second handler.

    Returns:
        The package logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(log_level)

    if not any(getattr(h, "_docker_archive", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        handler._docker_archive = True
        logger.addHandler(handler)

    # Pack tasks and executor threads are noisy at debug level
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    return logger

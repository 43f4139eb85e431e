"""Logging setup for the marketplace app."""

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(log_level: str = "INFO") -> None:
    """Send package logs to stdout with a fixed format.

    Safe to call more than once: the handler is installed only on the
    first call, later calls just adjust the level.
    """
    package_logger = logging.getLogger("fastapi_cargospace")
    package_logger.setLevel(log_level.upper())

    if not any(
        getattr(handler, "_cargospace", False)
        for handler in package_logger.handlers
    ):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(
            logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)
        )
        handler._cargospace = True  # type: ignore[attr-defined]
        package_logger.addHandler(handler)

    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)

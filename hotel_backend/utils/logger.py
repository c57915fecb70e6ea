"""Logging setup shared by every layer of the booking API."""

from __future__ import annotations

import logging
import sys
import time
from contextlib import contextmanager
from typing import Iterator, Optional

from hotel_backend.utils.config import get_settings


_LOGGER_INITIALIZED = False

# Third-party loggers that flood stdout at INFO under load.
_QUIET_LOGGERS = ("uvicorn.access", "httpx")


def configure_logging(level: Optional[str] = None) -> None:
    """Configure process-wide logging once."""

    global _LOGGER_INITIALIZED
    if _LOGGER_INITIALIZED:
        return

    resolved_level = (level or get_settings().log_level).upper()
    logging.basicConfig(
        level=resolved_level,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stdout,
    )
    if resolved_level != "DEBUG":
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
    _LOGGER_INITIALIZED = True


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)


@contextmanager
def log_duration(logger: logging.Logger, operation: str, **fields: object) -> Iterator[None]:
    """Emit a DEBUG line with elapsed milliseconds once the block finishes."""
    started = time.perf_counter()
    try:
        yield
    finally:
        elapsed_ms = (time.perf_counter() - started) * 1000.0
        details = " | ".join(f"{key}={value}" for key, value in fields.items())
        logger.debug(
            "%s finished in %.2fms%s",
            operation,
            elapsed_ms,
            f" | {details}" if details else "",
        )

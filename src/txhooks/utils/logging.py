"""Structured logging helpers for txhooks."""

from __future__ import annotations

import logging
import time
import uuid
from contextvars import ContextVar
from typing import Any, Optional

from .config import resolve_log_level

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

ROOT_LOGGER = "txhooks"


class CorrelationIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id()
        return True


def configure_logging(level: int | None = None) -> None:
    logger = logging.getLogger(ROOT_LOGGER)
    if logger.handlers:
        if level is not None:
            logger.setLevel(level)
        return
    handler = logging.StreamHandler()
    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(correlation_id)s | %(name)s | %(message)s"
    )
    handler.setFormatter(formatter)
    handler.addFilter(CorrelationIdFilter())
    logger.addHandler(handler)
    logger.setLevel(level if level is not None else resolve_log_level(default=logging.INFO))


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def set_correlation_id(value: Optional[str] = None) -> str:
    token = value or str(uuid.uuid4())
    _correlation_id.set(token)
    return token


def get_correlation_id() -> str:
    cid = _correlation_id.get()
    if cid is None:
        cid = set_correlation_id()
    return cid


def time_call(name: str, logger: logging.Logger, *, threshold_ms: int = 100, **details: Any):
    """
    Context manager logging how long the wrapped block took.

    Extra keyword arguments are attached to the log record, so callers can pass
    ``sql=...`` or ``mutation=...`` alongside the timing.
    """

    start = time.monotonic()

    class Timer:
        def __enter__(self):
            return self

        def __exit__(self, exc_type, exc, tb):
            elapsed_ms = (time.monotonic() - start) * 1000
            level = logging.WARNING if elapsed_ms >= threshold_ms else logging.DEBUG
            extra = {**details, "elapsed_ms": elapsed_ms, "failed": exc_type is not None}
            logger.log(level, "%s took %.2fms", name, elapsed_ms, extra=extra)

    return Timer()

"""
Environment-driven settings shared by clients and logging.
"""

from __future__ import annotations

import logging
import os

DSN_ENV_VAR = "TXHOOKS_DSN"
SLOW_QUERY_ENV_VAR = "TXHOOKS_SLOW_QUERY_MS"
LOG_LEVEL_ENV_VAR = "TXHOOKS_LOG_LEVEL"


def resolve_slow_query_ms(*, default: int, override: int | None = None) -> int:
    """
    Pick the slow-statement threshold: explicit override, then env, then default.
    """
    if override is not None:
        return override
    raw = os.getenv(SLOW_QUERY_ENV_VAR)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"Invalid integer value for {SLOW_QUERY_ENV_VAR}: {raw!r}") from None
    if value < 0:
        raise ValueError(f"{SLOW_QUERY_ENV_VAR} must be non-negative, got {value}")
    return value


def resolve_log_level(*, default: int) -> int:
    raw = os.getenv(LOG_LEVEL_ENV_VAR)
    if not raw:
        return default
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.strip().upper())
    if isinstance(level, int):
        return level
    raise ValueError(f"Unknown log level in {LOG_LEVEL_ENV_VAR}: {raw!r}")

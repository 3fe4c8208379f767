"""Security helpers for txhooks."""

from .dsns import DSNConfig, parse_dsn
from .redaction import redact_params, redact_row

__all__ = ["DSNConfig", "parse_dsn", "redact_params", "redact_row"]

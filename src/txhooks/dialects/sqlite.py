"""
SQLite dialect implementation.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Any, Final, List

from .base import DialectCapabilities, MutationRenderer


class SQLiteDialect(MutationRenderer):
    """
    SQLite dialect using qmark params and ISO-8601 text for temporal values.
    """

    name: Final[str] = "sqlite"
    capabilities: Final[DialectCapabilities] = DialectCapabilities(
        supports_on_conflict=True,
        supports_schema_namespaces=False,
    )

    def parameter_placeholder(self) -> str:
        return "?"

    def begin_statements(self, isolation_level: str | None = None) -> List[str]:
        # SQLite spells its locking modes as BEGIN DEFERRED/IMMEDIATE/EXCLUSIVE.
        if isolation_level:
            return [f"BEGIN {isolation_level.upper()}"]
        return ["BEGIN"]

    def adapt_value(self, value: Any) -> Any:
        # The stdlib datetime adapters are deprecated; store text explicitly.
        if isinstance(value, (datetime, date)):
            return value.isoformat()
        return value
"""
MySQL dialect implementation.
"""

from __future__ import annotations

from typing import Final, List

from .base import DialectCapabilities, MutationRenderer


class MySQLDialect(MutationRenderer):
    """
    MySQL dialect using backtick quoting and ON DUPLICATE KEY upserts.
    """

    name: Final[str] = "mysql"
    capabilities: Final[DialectCapabilities] = DialectCapabilities(
        supports_on_conflict=False,
        supports_schema_namespaces=True,
    )

    def quote_identifier(self, identifier: str) -> str:
        escaped = identifier.replace("`", "``")
        return f"`{escaped}`"

    def parameter_placeholder(self) -> str:
        return "%s"

    def begin_statements(self, isolation_level: str | None = None) -> List[str]:
        statements = []
        if isolation_level:
            statements.append(f"SET TRANSACTION ISOLATION LEVEL {isolation_level.upper()}")
        statements.append("START TRANSACTION")
        return statements


"""
PostgreSQL dialect implementation.
"""

from __future__ import annotations

from typing import Final

from .base import DialectCapabilities, MutationRenderer


class PostgresDialect(MutationRenderer):
    """
    PostgreSQL dialect using percent positional parameters.
    """

    name: Final[str] = "postgresql"
    capabilities: Final[DialectCapabilities] = DialectCapabilities(
        supports_on_conflict=True,
        supports_schema_namespaces=True,
    )

    def parameter_placeholder(self) -> str:
        return "%s"
"""
PostgreSQL transactional client.
"""

from __future__ import annotations

from typing import Any

from ..dialects.postgres import PostgresDialect
from .base import AdapterConfigurationError, AdapterConnectionError, ConnectionConfig
from .sql import SQLClient

UNIQUE_VIOLATION = "23505"


def _load_driver():
    try:
        import psycopg

        return psycopg
    except ImportError:
        return None


class PostgresClient(SQLClient):
    """
    Client wrapping the psycopg PostgreSQL driver.
    """

    driver_name = "postgres"

    def __init__(self, slow_query_ms: int | None = None) -> None:
        super().__init__(slow_query_ms=slow_query_ms)
        self.dialect = PostgresDialect()

    def _open_connection(self, config: ConnectionConfig) -> Any:
        driver = _load_driver()
        if driver is None:
            raise AdapterConfigurationError("psycopg is required to use PostgresClient.")

        options = dict(config.options)
        if config.ssl:
            for key, value in config.ssl.postgres_options().items():
                options.setdefault(key, value)

        # Strip txhooks-only query keys; psycopg rejects unknown conninfo params.
        conninfo = config.url.split("?", 1)[0]
        try:
            connection = driver.connect(conninfo, autocommit=True, **options)
        except Exception as exc:
            raise AdapterConnectionError("Failed to connect to PostgreSQL.") from exc
        self._driver = driver
        return connection

    def _is_duplicate_key(self, exc: BaseException) -> bool:
        return getattr(exc, "sqlstate", None) == UNIQUE_VIOLATION

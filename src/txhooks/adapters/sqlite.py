"""
SQLite transactional client.
"""

from __future__ import annotations

import sqlite3

from ..dialects.sqlite import SQLiteDialect
from .base import ConnectionConfig
from .sql import SQLClient


class SQLiteClient(SQLClient):
    """
    Client wrapping the Python stdlib sqlite3 module.
    """

    driver_name = "sqlite"

    def __init__(self, slow_query_ms: int | None = None) -> None:
        super().__init__(slow_query_ms=slow_query_ms)
        self.dialect = SQLiteDialect()
        self._driver = sqlite3

    def _open_connection(self, config: ConnectionConfig) -> sqlite3.Connection:
        path = self._normalize_path(config.url)
        connect_timeout = float(config.options.get("connect_timeout", 5.0))
        # isolation_level=None leaves transaction control to explicit BEGIN/COMMIT.
        connection = sqlite3.connect(
            path,
            isolation_level=None,
            timeout=connect_timeout,
            check_same_thread=False,
        )
        connection.row_factory = sqlite3.Row
        connection.execute("PRAGMA foreign_keys = ON")
        return connection

    def _is_duplicate_key(self, exc: BaseException) -> bool:
        if not isinstance(exc, sqlite3.IntegrityError):
            return False
        message = str(exc)
        return "UNIQUE constraint failed" in message or "PRIMARY KEY" in message

    @staticmethod
    def _normalize_path(url: str) -> str:
        if url in ("sqlite://", "sqlite:///:memory:"):
            return ":memory:"
        prefix = "sqlite:///"
        if url.startswith(prefix):
            return url[len(prefix) :].split("?", 1)[0]
        return url

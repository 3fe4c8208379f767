"""
MySQL transactional client.
"""

from __future__ import annotations

from typing import Any

from ..dialects.mysql import MySQLDialect
from .base import AdapterConfigurationError, AdapterConnectionError, ConnectionConfig
from .sql import SQLClient

ER_DUP_ENTRY = 1062


def _load_driver():
    try:
        import pymysql  # type: ignore[import-untyped]

        return pymysql
    except ImportError:
        try:
            import MySQLdb

            return MySQLdb
        except ImportError:
            return None


class MySQLClient(SQLClient):
    """
    Client wrapping a MySQL DB-API driver (PyMySQL or mysqlclient).
    """

    driver_name = "mysql"

    def __init__(self, slow_query_ms: int | None = None) -> None:
        super().__init__(slow_query_ms=slow_query_ms)
        self.dialect = MySQLDialect()

    def _open_connection(self, config: ConnectionConfig) -> Any:
        driver = _load_driver()
        if driver is None:
            raise AdapterConfigurationError(
                "PyMySQL or mysqlclient is required to use MySQLClient."
            )
        if not config.dsn:
            raise AdapterConfigurationError(
                "ConnectionConfig must be built from a DSN for MySQL connections."
            )

        dsn = config.dsn
        connect_kwargs = {
            "host": dsn.host or "localhost",
            "user": dsn.username,
            "password": dsn.password,
            "database": dsn.database,
            **config.options,
        }
        if dsn.port:
            connect_kwargs["port"] = dsn.port
        if config.ssl:
            for key, value in config.ssl.mysql_options().items():
                connect_kwargs.setdefault(key, value)

        try:
            connection = driver.connect(**connect_kwargs)
        except Exception as exc:
            raise AdapterConnectionError("Failed to connect to MySQL.") from exc
        connection.autocommit(True)
        self._driver = driver
        return connection

    def _is_duplicate_key(self, exc: BaseException) -> bool:
        args = getattr(exc, "args", ())
        return bool(args) and args[0] == ER_DUP_ENTRY

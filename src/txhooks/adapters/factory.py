"""
Build a connected transactional client from a DSN or ConnectionConfig.
"""

from __future__ import annotations

from typing import Any, Callable, Dict

from .base import AdapterConfigurationError, ConnectionConfig
from .mysql import MySQLClient
from .postgres import PostgresClient
from .spanner import SpannerClient
from .sqlite import SQLiteClient

CLIENTS: Dict[str, Callable[[], Any]] = {
    "sqlite": SQLiteClient,
    "postgres": PostgresClient,
    "postgresql": PostgresClient,
    "mysql": MySQLClient,
    "spanner": SpannerClient,
}


def create_client(config: ConnectionConfig | str | None = None) -> Any:
    """
    Return a connected client for ``config``.

    Without arguments the DSN is read from ``TXHOOKS_DSN``.
    """

    if config is None:
        config = ConnectionConfig.from_env()
    elif isinstance(config, str):
        config = ConnectionConfig.from_dsn(config)

    factory = CLIENTS.get(config.scheme.lower())
    if factory is None:
        raise AdapterConfigurationError(
            f"No client registered for scheme '{config.scheme}' ({config.redacted_dsn()})"
        )
    client = factory()
    client.connect(config)
    return client

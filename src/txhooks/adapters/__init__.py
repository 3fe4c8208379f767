"""
Transactional client interfaces and implementations.
"""

from .base import (
    AdapterConfigurationError,
    AdapterConnectionError,
    AdapterError,
    AdapterExecutionError,
    AlreadyExistsError,
    ConflictError,
    ConnectionConfig,
    NotFoundError,
    SSLConfig,
    TransactionalClient,
)
from .factory import create_client
from .mysql import MySQLClient
from .postgres import PostgresClient
from .spanner import SpannerClient, SpannerTransaction
from .sql import SQLClient, SQLTransaction
from .sqlite import SQLiteClient

__all__ = [
    "ConnectionConfig",
    "SSLConfig",
    "TransactionalClient",
    "AdapterError",
    "AdapterConfigurationError",
    "AdapterConnectionError",
    "AdapterExecutionError",
    "AlreadyExistsError",
    "ConflictError",
    "NotFoundError",
    "SQLClient",
    "SQLTransaction",
    "SQLiteClient",
    "PostgresClient",
    "MySQLClient",
    "SpannerClient",
    "SpannerTransaction",
    "create_client",
]

"""
Dialect strategy registry.
"""

from .base import Dialect, DialectCapabilities, MutationRenderer
from .mysql import MySQLDialect
from .postgres import PostgresDialect
from .sqlite import SQLiteDialect

__all__ = [
    "Dialect",
    "DialectCapabilities",
    "MutationRenderer",
    "SQLiteDialect",
    "PostgresDialect",
    "MySQLDialect",
]

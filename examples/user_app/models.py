"""
User entity written the way a schema code generator would emit it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Tuple
import uuid

from txhooks import COMMIT_TIMESTAMP, Mutation

USERS_TABLE = "users"

USERS_DDL = """
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    name TEXT NOT NULL,
    email TEXT NOT NULL,
    created_at TEXT,
    updated_at TEXT
)
"""


def user_columns() -> Tuple[str, ...]:
    return ("id", "name", "email", "created_at", "updated_at")


def user_primary_keys() -> Tuple[str, ...]:
    return ("id",)


@dataclass
class User:
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    name: str = ""
    email: str = ""
    created_at: Any = COMMIT_TIMESTAMP
    updated_at: Any = COMMIT_TIMESTAMP

    def _values(self, columns: Tuple[str, ...]) -> List[Any]:
        return [getattr(self, column) for column in columns]

    def insert(self) -> Mutation:
        columns = user_columns()
        return Mutation.insert(USERS_TABLE, columns, self._values(columns), key_columns=user_primary_keys())

    def update(self) -> Mutation:
        columns = ("id", "name", "email", "updated_at")
        return Mutation.update(USERS_TABLE, columns, self._values(columns), key_columns=user_primary_keys())

    def upsert(self) -> Mutation:
        columns = user_columns()
        return Mutation.upsert(USERS_TABLE, columns, self._values(columns), key_columns=user_primary_keys())

    def delete(self) -> Mutation:
        keys = user_primary_keys()
        return Mutation.delete(USERS_TABLE, keys, self._values(keys))


def read_users(client) -> List[User]:
    """
    Load every stored user ordered by name.
    """

    rows = client.execute(
        "SELECT id, name, email, created_at, updated_at FROM users ORDER BY name"
    ).fetchall()
    return [User(**dict(row)) for row in rows]

"""
Utility helpers for running the user example end-to-end against SQLite.
"""

from __future__ import annotations

from typing import Any, Dict, List

from txhooks import MutationKind, WrappedModel, create_client
from txhooks.adapters import SQLiteClient
from txhooks.persistence import TransactionScope

from .models import USERS_DDL, User, read_users


def bootstrap_client(dsn: str = "sqlite:///:memory:") -> SQLiteClient:
    """
    Create a SQLite-backed client and ensure the users table exists.
    """

    client = create_client(dsn)
    client.execute(USERS_DDL)
    return client


def normalize_email(txn: TransactionScope, model: WrappedModel[User]) -> None:
    model.entity.email = model.entity.email.strip().lower()


def register_user(client: SQLiteClient, name: str, email: str) -> User:
    """
    Insert a user, lower-casing the address in a before-insert hook.
    """

    model = WrappedModel(User(name=name, email=email), client=client)
    model.before(MutationKind.INSERT, normalize_email)
    model.apply(MutationKind.INSERT)
    return model.entity


def run_demo(dsn: str = "sqlite:///:memory:") -> List[Dict[str, Any]]:
    """
    Register two users, rename one through an upsert and return the stored rows.
    """

    client = bootstrap_client(dsn)
    try:
        register_user(client, "Alice Carter", "Alice@Example.com ")
        brian = register_user(client, "Brian Kim", "brian@example.com")

        model = WrappedModel(brian, client=client)
        seen: Dict[str, int] = {}

        @model.after(MutationKind.UPSERT)
        def count_users(txn: TransactionScope, wrapped: WrappedModel[User]) -> None:
            seen["users"] = txn.execute("SELECT COUNT(*) FROM users").fetchone()[0]

        brian.name = "Brian K."
        model.apply(MutationKind.UPSERT)
        return [
            {"name": user.name, "email": user.email, "users_seen": seen["users"]}
            for user in read_users(client)
        ]
    finally:
        client.close()

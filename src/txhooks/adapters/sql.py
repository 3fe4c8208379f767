"""
Shared transactional client for DB-API drivers.

Mutations buffered during a transaction are rendered through the client's
dialect and applied, in buffer order, right before COMMIT.
"""

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Optional, Sequence

from ..core.mutation import COMMIT_TIMESTAMP, Mutation, MutationKind
from ..dialects.base import Dialect
from ..persistence.transaction import TransactionError, TransactionScope
from ..security.redaction import redact_params, redact_row
from ..utils import get_logger, resolve_slow_query_ms, time_call
from .base import (
    AdapterConnectionError,
    AdapterExecutionError,
    AlreadyExistsError,
    ConnectionConfig,
    NotFoundError,
    TransactionFunc,
)


class SQLTransaction(TransactionScope):
    """
    Transaction scope bound to an open SQL connection.

    ``execute`` runs reads (or immediate writes) on the same connection, inside
    the transaction that was opened for this scope.
    """

    def __init__(self, client: "SQLClient", *, timeout: Optional[float] = None) -> None:
        super().__init__(timeout=timeout)
        self._client = client

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> Any:
        if self.closed:
            raise TransactionError("Transaction is no longer active.")
        self.check_deadline()
        return self._client.execute(sql, params)


class SQLClient:
    """
    Base class for the sqlite3, psycopg and PyMySQL client adapters.

    Subclasses provide ``_open_connection`` and ``_is_duplicate_key``. The
    driver connection is kept in autocommit mode and transactions are opened
    with explicit statements from the dialect.
    """

    dialect: Dialect
    driver_name = "sql"

    def __init__(self, slow_query_ms: int | None = None) -> None:
        self.logger = get_logger(f"adapters.{self.driver_name}")
        self.slow_query_ms = resolve_slow_query_ms(default=100, override=slow_query_ms)
        self.config: ConnectionConfig | None = None
        self._connection: Any = None
        self._driver: Any = None
        self._lock = threading.RLock()
        self._active: SQLTransaction | None = None

    # ------------------------------------------------------------------ #
    # Connection management
    # ------------------------------------------------------------------ #
    def connect(self, config: ConnectionConfig) -> Any:
        self.logger.info("Connecting %s client to %s", self.driver_name, config.descriptive_label())
        self._connection = self._open_connection(config)
        self.config = config
        return self._connection

    def _open_connection(self, config: ConnectionConfig) -> Any:
        raise NotImplementedError

    def close(self) -> None:
        with self._lock:
            if self._connection is None:
                return
            try:
                self._connection.close()
            finally:
                self._connection = None

    def __enter__(self) -> "SQLClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _ensure_connection(self) -> Any:
        if self._connection is None:
            raise AdapterConnectionError(f"{self.__class__.__name__} is not connected.")
        return self._connection

    # ------------------------------------------------------------------ #
    # Execution helpers
    # ------------------------------------------------------------------ #
    def execute(self, sql: str, params: Sequence[Any] | None = None) -> Any:
        with self._lock:
            connection = self._ensure_connection()
            cursor = connection.cursor()
            params = tuple(params or ())
            with time_call(
                f"{self.driver_name}.execute",
                self.logger,
                threshold_ms=self.slow_query_ms,
                sql=sql,
                params=redact_params(params),
            ):
                try:
                    cursor.execute(sql, params)
                except self._driver_errors() as exc:
                    raise AdapterExecutionError(f"Statement failed: {exc}") from exc
            return cursor

    def _driver_errors(self) -> Any:
        return getattr(self._driver, "Error", ())

    def _is_duplicate_key(self, exc: BaseException) -> bool:
        return False

    # ------------------------------------------------------------------ #
    # Transactions
    # ------------------------------------------------------------------ #
    def run_in_transaction(self, func: TransactionFunc, *, timeout: Optional[float] = None) -> datetime:
        if timeout is None and self.config is not None:
            timeout = self.config.timeout
        with self._lock:
            if self._active is not None:
                raise TransactionError("A transaction is already running on this client.")
            txn = SQLTransaction(self, timeout=timeout)
            self._active = txn
            try:
                self._begin()
                try:
                    func(txn)
                    txn.check_deadline()
                    commit_ts = datetime.now(timezone.utc)
                    for mutation in txn.mutations:
                        self._apply(mutation, commit_ts)
                    self.execute("COMMIT")
                except BaseException:
                    self._rollback()
                    raise
            finally:
                txn.close()
                self._active = None
        self.logger.debug(
            "Committed %s mutation(s) at %s", len(txn.mutations), commit_ts.isoformat()
        )
        return commit_ts

    def _begin(self) -> None:
        isolation_level = self.config.isolation_level if self.config else None
        for statement in self.dialect.begin_statements(isolation_level):
            self.execute(statement)

    def _rollback(self) -> None:
        try:
            self.execute("ROLLBACK")
        except AdapterExecutionError:
            self.logger.exception("Rollback failed; the original error is re-raised")

    def _apply(self, mutation: Mutation, commit_ts: datetime) -> None:
        if any(value is COMMIT_TIMESTAMP for value in mutation.values):
            mutation = replace(
                mutation,
                values=tuple(commit_ts if value is COMMIT_TIMESTAMP else value for value in mutation.values),
            )

        if mutation.kind is MutationKind.UPDATE:
            sql, params = self.dialect.render_exists(mutation)
            if self.execute(sql, params).fetchone() is None:
                raise NotFoundError(
                    f"Row not found in '{mutation.table}' for key {mutation.key_values()!r}"
                )

        self.logger.debug(
            "Applying %s to %s: %s",
            mutation.kind.value,
            mutation.table,
            redact_row(mutation.columns, mutation.values),
        )
        renderers = {
            MutationKind.INSERT: self.dialect.render_insert,
            MutationKind.UPDATE: self.dialect.render_update,
            MutationKind.UPSERT: self.dialect.render_upsert,
            MutationKind.DELETE: self.dialect.render_delete,
        }
        sql, params = renderers[mutation.kind](mutation)
        try:
            self.execute(sql, params)
        except AdapterExecutionError as exc:
            cause = exc.__cause__
            if mutation.kind is MutationKind.INSERT and cause is not None and self._is_duplicate_key(cause):
                raise AlreadyExistsError(
                    f"Row already exists in '{mutation.table}' for key {mutation.key_values()!r}"
                ) from cause
            raise

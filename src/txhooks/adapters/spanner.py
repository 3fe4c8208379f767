"""
Cloud Spanner transactional client.

Spanner owns retry-on-abort: ``Database.run_in_transaction`` re-runs the unit
of work on contention, so every attempt gets a fresh scope that writes
straight into the native transaction's mutation buffer.
"""

from __future__ import annotations

import time
from datetime import datetime
from typing import Any, Dict, List, Optional

from ..core.mutation import COMMIT_TIMESTAMP, Mutation, MutationKind
from ..persistence.transaction import DeadlineExceededError, TransactionScope
from ..utils import get_logger, time_call
from .base import (
    AdapterConfigurationError,
    AdapterExecutionError,
    AlreadyExistsError,
    ConflictError,
    ConnectionConfig,
    NotFoundError,
    TransactionFunc,
)


# Keys ConnectionConfig parses for the SQL drivers; spanner.Client rejects them.
_SQL_ONLY_OPTIONS = frozenset({"connect_timeout"})


def _load_driver():
    try:
        from google.cloud import spanner

        return spanner
    except ImportError:
        return None


def _load_api_exceptions():
    try:
        from google.api_core import exceptions

        return exceptions
    except ImportError:
        return None


class SpannerTransaction(TransactionScope):
    """
    Scope wrapping a native ``google.cloud.spanner`` transaction.

    The native transaction stays reachable as ``native`` for reads.
    """

    def __init__(
        self,
        native: Any,
        driver: Any,
        *,
        timeout: Optional[float] = None,
        deadline: Optional[float] = None,
    ) -> None:
        super().__init__(timeout=timeout, deadline=deadline)
        self.native = native
        self._driver = driver

    def _buffer(self, batch: List[Mutation]) -> None:
        super()._buffer(batch)
        for mutation in batch:
            self._write(mutation)

    def _write(self, mutation: Mutation) -> None:
        values = [
            self._driver.COMMIT_TIMESTAMP if value is COMMIT_TIMESTAMP else value
            for value in mutation.values
        ]
        if mutation.kind is MutationKind.DELETE:
            keyset = self._driver.KeySet(keys=[list(mutation.key_values())])
            self.native.delete(mutation.table, keyset)
            return
        writers = {
            MutationKind.INSERT: self.native.insert,
            MutationKind.UPDATE: self.native.update,
            MutationKind.UPSERT: self.native.insert_or_update,
        }
        writers[mutation.kind](mutation.table, list(mutation.columns), [values])

    def execute(
        self,
        sql: str,
        params: Optional[Dict[str, Any]] = None,
        param_types: Optional[Dict[str, Any]] = None,
    ) -> Any:
        self.check_deadline()
        return self.native.execute_sql(sql, params=params, param_types=param_types)


class SpannerClient:
    """
    Client delegating transactions to a ``google.cloud.spanner`` database handle.

    Pass an existing ``Database`` as ``database`` or call ``connect`` with a
    ``spanner:///projects/<p>/instances/<i>/databases/<d>`` DSN. The emulator is
    picked up through ``SPANNER_EMULATOR_HOST`` by the driver itself.
    """

    driver_name = "spanner"

    def __init__(self, database: Any = None) -> None:
        self.logger = get_logger("adapters.spanner")
        self.config: ConnectionConfig | None = None
        self._database = database
        self._client: Any = None

    def connect(self, config: ConnectionConfig) -> Any:
        driver = _load_driver()
        if driver is None:
            raise AdapterConfigurationError(
                "google-cloud-spanner is required to use SpannerClient."
            )
        if not config.dsn:
            raise AdapterConfigurationError(
                "ConnectionConfig must be built from a DSN for Spanner connections."
            )
        try:
            project, instance_id, database_id = config.dsn.spanner_database_path()
        except ValueError as exc:
            raise AdapterConfigurationError(str(exc)) from exc

        self.logger.info("Connecting spanner client to %s", config.descriptive_label())
        options = {key: value for key, value in config.options.items() if key not in _SQL_ONLY_OPTIONS}
        self._client = driver.Client(project=project, **options)
        self._database = self._client.instance(instance_id).database(database_id)
        self.config = config
        return self._database

    def close(self) -> None:
        if self._client is not None:
            close = getattr(self._client, "close", None)
            if close is not None:
                close()
            self._client = None
        self._database = None

    def __enter__(self) -> "SpannerClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def run_in_transaction(self, func: TransactionFunc, *, timeout: Optional[float] = None) -> datetime:
        if self._database is None:
            raise AdapterConfigurationError("SpannerClient has no database; call connect() first.")
        driver = _load_driver()
        if driver is None:
            raise AdapterConfigurationError(
                "google-cloud-spanner is required to use SpannerClient."
            )
        if timeout is None and self.config is not None:
            timeout = self.config.timeout
        deadline = None if timeout is None else time.monotonic() + timeout
        attempts: List[SpannerTransaction] = []

        def unit_of_work(native: Any) -> None:
            txn = SpannerTransaction(native, driver, timeout=timeout, deadline=deadline)
            attempts.append(txn)
            try:
                func(txn)
                txn.check_deadline()
            finally:
                txn.close()

        kwargs: Dict[str, Any] = {}
        if timeout is not None:
            kwargs["timeout_secs"] = timeout

        api_exceptions = _load_api_exceptions()
        api_error = api_exceptions.GoogleAPICallError if api_exceptions else ()
        with time_call("spanner.run_in_transaction", self.logger, threshold_ms=1000):
            try:
                self._database.run_in_transaction(unit_of_work, **kwargs)
            except api_error as exc:
                raise self._translate(exc, api_exceptions) from exc

        committed = attempts[-1].native.committed
        if len(attempts) > 1:
            self.logger.info("Spanner transaction committed after %s attempts", len(attempts))
        return committed

    @staticmethod
    def _translate(exc: Exception, api_exceptions: Any) -> Exception:
        mapping = [
            (api_exceptions.NotFound, NotFoundError),
            (api_exceptions.AlreadyExists, AlreadyExistsError),
            (api_exceptions.Aborted, ConflictError),
            (api_exceptions.DeadlineExceeded, DeadlineExceededError),
        ]
        for source, target in mapping:
            if isinstance(exc, source):
                return target(str(exc))
        return AdapterExecutionError(f"Spanner request failed: {exc}")

import threading
from datetime import datetime

import pytest

from txhooks.adapters import (
    AdapterConnectionError,
    AdapterExecutionError,
    AlreadyExistsError,
    ConnectionConfig,
    NotFoundError,
    SQLiteClient,
)
from txhooks.core import COMMIT_TIMESTAMP, Mutation
from txhooks.persistence import TransactionError


def make_client(tmp_path, name="client.db"):
    client = SQLiteClient()
    client.connect(ConnectionConfig(url=f"sqlite:///{tmp_path / name}"))
    client.execute(
        'CREATE TABLE IF NOT EXISTS "item" (id INTEGER PRIMARY KEY, label TEXT NOT NULL, qty INTEGER, stamped_at TEXT)'
    )
    return client


def rows(client):
    return [tuple(row) for row in client.execute('SELECT id, label, qty FROM "item" ORDER BY id').fetchall()]


def write(client, *mutations):
    return client.run_in_transaction(lambda txn: txn.buffer_write(mutations))


def test_buffered_writes_apply_at_commit(tmp_path):
    client = make_client(tmp_path)
    seen_inside = []

    def work(txn):
        txn.buffer_write([Mutation.insert("item", ["id", "label", "qty"], [1, "bolt", 3])])
        seen_inside.append(txn.execute('SELECT COUNT(*) FROM "item"').fetchone()[0])

    committed = client.run_in_transaction(work)

    assert isinstance(committed, datetime)
    assert seen_inside == [0]
    assert rows(client) == [(1, "bolt", 3)]
    client.close()


def test_commit_timestamp_placeholder_is_replaced(tmp_path):
    client = make_client(tmp_path)

    committed = write(
        client,
        Mutation.insert("item", ["id", "label", "stamped_at"], [1, "nut", COMMIT_TIMESTAMP]),
    )

    stamped = client.execute('SELECT stamped_at FROM "item" WHERE id = ?', (1,)).fetchone()[0]
    assert stamped == committed.isoformat()
    client.close()


def test_insert_of_existing_key_raises_already_exists(tmp_path):
    client = make_client(tmp_path)
    write(client, Mutation.insert("item", ["id", "label"], [1, "nut"], key_columns=["id"]))

    with pytest.raises(AlreadyExistsError):
        write(client, Mutation.insert("item", ["id", "label"], [1, "bolt"], key_columns=["id"]))

    assert rows(client) == [(1, "nut", None)]
    client.close()


def test_not_null_violation_is_not_reported_as_duplicate(tmp_path):
    client = make_client(tmp_path)
    with pytest.raises(AdapterExecutionError) as excinfo:
        write(client, Mutation.insert("item", ["id", "label"], [1, None]))
    assert not isinstance(excinfo.value, AlreadyExistsError)
    client.close()


def test_update_requires_existing_row(tmp_path):
    client = make_client(tmp_path)
    with pytest.raises(NotFoundError):
        write(client, Mutation.update("item", ["id", "qty"], [9, 1], key_columns=["id"]))
    client.close()


def test_upsert_inserts_then_updates_given_columns(tmp_path):
    client = make_client(tmp_path)
    write(client, Mutation.upsert("item", ["id", "label", "qty"], [1, "bolt", 3], key_columns=["id"]))
    write(client, Mutation.upsert("item", ["id", "label"], [1, "big bolt"], key_columns=["id"]))

    assert rows(client) == [(1, "big bolt", 3)]
    client.close()


def test_delete_of_missing_row_is_a_no_op(tmp_path):
    client = make_client(tmp_path)
    write(client, Mutation.delete("item", ["id"], [42]))
    assert rows(client) == []
    client.close()


def test_later_failure_rolls_back_earlier_writes(tmp_path):
    client = make_client(tmp_path)

    with pytest.raises(NotFoundError):
        write(
            client,
            Mutation.insert("item", ["id", "label"], [1, "bolt"]),
            Mutation.update("item", ["id", "qty"], [2, 5], key_columns=["id"]),
        )

    assert rows(client) == []
    client.close()


def test_error_in_unit_of_work_rolls_back_immediate_statements(tmp_path):
    client = make_client(tmp_path)

    def work(txn):
        txn.execute('INSERT INTO "item" (id, label) VALUES (?, ?)', (5, "direct"))
        raise RuntimeError("abort")

    with pytest.raises(RuntimeError, match="abort"):
        client.run_in_transaction(work)

    assert rows(client) == []
    client.close()


def test_interrupt_in_unit_of_work_rolls_back_and_frees_connection(tmp_path):
    client = make_client(tmp_path)

    def work(txn):
        txn.execute('INSERT INTO "item" (id, label) VALUES (?, ?)', (6, "ghost"))
        raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        client.run_in_transaction(work)

    write(client, Mutation.insert("item", ["id", "label", "qty"], [7, "washer", 2]))
    assert rows(client) == [(7, "washer", 2)]
    client.close()


def test_nested_transactions_are_rejected(tmp_path):
    client = make_client(tmp_path)

    def outer(txn):
        client.run_in_transaction(lambda inner: None)

    with pytest.raises(TransactionError, match="already running"):
        client.run_in_transaction(outer)

    # The client is usable again after the failed attempt.
    write(client, Mutation.insert("item", ["id", "label"], [1, "ok"]))
    assert rows(client) == [(1, "ok", None)]
    client.close()


def test_scope_is_closed_after_transaction(tmp_path):
    client = make_client(tmp_path)
    scopes = []
    client.run_in_transaction(scopes.append)

    with pytest.raises(TransactionError):
        scopes[0].execute("SELECT 1")
    client.close()


def test_default_timeout_comes_from_config(tmp_path):
    client = SQLiteClient()
    client.connect(ConnectionConfig.from_dsn(f"sqlite:///{tmp_path / 't.db'}?timeout=30"))
    scopes = []

    client.run_in_transaction(scopes.append)

    assert scopes[0].timeout == 30.0
    client.close()


def test_bad_statement_raises_execution_error(tmp_path):
    client = make_client(tmp_path)
    with pytest.raises(AdapterExecutionError):
        client.execute("SELECT * FROM missing_table")
    client.close()


def test_execute_requires_connection():
    client = SQLiteClient()
    with pytest.raises(AdapterConnectionError):
        client.execute("SELECT 1")


def test_close_is_idempotent_and_context_managed(tmp_path):
    with make_client(tmp_path) as client:
        assert rows(client) == []
    client.close()
    with pytest.raises(AdapterConnectionError):
        client.execute("SELECT 1")


def test_concurrent_transactions_are_serialized(tmp_path):
    client = make_client(tmp_path)
    errors: list[Exception] = []
    barrier = threading.Barrier(4)

    def worker(offset: int) -> None:
        try:
            barrier.wait()
            for idx in range(25):
                key = offset * 100 + idx
                write(client, Mutation.insert("item", ["id", "label"], [key, f"item-{key}"]))
        except Exception as exc:  # pragma: no cover - failure path
            errors.append(exc)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len(rows(client)) == 100
    client.close()

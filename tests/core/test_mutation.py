import pytest

from txhooks.core import COMMIT_TIMESTAMP, Mutation, MutationKind, UnrecognizedMutationError
from txhooks.core.mutation import _CommitTimestamp
from txhooks.hooks import HookEvent


@pytest.mark.parametrize(
    "kind, expected",
    [
        (MutationKind.INSERT, (HookEvent.BEFORE_INSERT, HookEvent.AFTER_INSERT)),
        (MutationKind.UPDATE, (HookEvent.BEFORE_UPDATE, HookEvent.AFTER_UPDATE)),
        (MutationKind.UPSERT, (HookEvent.BEFORE_UPSERT, HookEvent.AFTER_UPSERT)),
        (MutationKind.DELETE, (HookEvent.BEFORE_DELETE, HookEvent.AFTER_DELETE)),
    ],
)
def test_each_kind_maps_to_one_event_pair(kind, expected):
    assert kind.events() == expected


def test_coerce_accepts_members_and_names():
    assert MutationKind.coerce(MutationKind.DELETE) is MutationKind.DELETE
    assert MutationKind.coerce("upsert") is MutationKind.UPSERT
    assert MutationKind.coerce("INSERT") is MutationKind.INSERT


@pytest.mark.parametrize("value", [None, 0, 5, "replace", "", object()])
def test_coerce_rejects_unknown_kinds(value):
    with pytest.raises(UnrecognizedMutationError):
        MutationKind.coerce(value)


def test_unrecognized_mutation_error_is_value_error():
    assert issubclass(UnrecognizedMutationError, ValueError)


def test_delete_mutation_carries_only_keys():
    mutation = Mutation.delete("users", ["id"], ["u-1"])
    assert mutation.kind is MutationKind.DELETE
    assert mutation.columns == ("id",)
    assert mutation.key_values() == ("u-1",)
    mutation.validate()


def test_non_key_columns_and_as_dict():
    mutation = Mutation.update("users", ["id", "name"], ["u-1", "Ann"], key_columns=["id"])
    assert mutation.non_key_columns() == ("name",)
    assert mutation.as_dict() == {"id": "u-1", "name": "Ann"}


@pytest.mark.parametrize(
    "mutation, message",
    [
        (Mutation.insert("", ["id"], [1]), "table name"),
        (Mutation.insert("users", [], []), "no columns"),
        (Mutation.insert("users", ["id", "name"], [1]), "2 columns but 1 values"),
        (Mutation.insert("users", ["id", "id"], [1, 2]), "repeats a column"),
        (Mutation.update("users", ["name"], ["Ann"], key_columns=["id"]), "missing"),
        (Mutation.upsert("users", ["id"], [1], key_columns=[]), "requires key columns"),
    ],
)
def test_validate_reports_structural_problems(mutation, message):
    with pytest.raises(ValueError, match=message):
        mutation.validate()


def test_commit_timestamp_is_a_singleton():
    assert _CommitTimestamp() is COMMIT_TIMESTAMP
    assert repr(COMMIT_TIMESTAMP) == "COMMIT_TIMESTAMP"

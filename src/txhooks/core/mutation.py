"""
Mutation kinds and the opaque row-level write value buffered into transactions.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Sequence, Tuple

if TYPE_CHECKING:
    from ..hooks.dispatcher import HookEvent


class UnrecognizedMutationError(ValueError):
    """Raised when a mutation kind outside the supported set is requested."""


class _CommitTimestamp:
    """
    Placeholder value replaced by the commit timestamp when the write is applied.
    """

    _instance: "_CommitTimestamp | None" = None

    def __new__(cls) -> "_CommitTimestamp":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "COMMIT_TIMESTAMP"


COMMIT_TIMESTAMP = _CommitTimestamp()


class MutationKind(str, enum.Enum):
    INSERT = "insert"
    UPDATE = "update"
    UPSERT = "upsert"
    DELETE = "delete"

    def events(self) -> Tuple["HookEvent", "HookEvent"]:
        """
        Return the (before, after) lifecycle events fired around this mutation.
        """
        from ..hooks.dispatcher import HookEvent

        return HookEvent(f"before_{self.value}"), HookEvent(f"after_{self.value}")

    @classmethod
    def coerce(cls, value: Any) -> "MutationKind":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                pass
        raise UnrecognizedMutationError(f"Unrecognized mutation kind: {value!r}")


@dataclass(frozen=True)
class Mutation:
    """
    Description of a single row write.

    ``columns`` and ``values`` are parallel. ``key_columns`` names the primary
    key columns, which must also appear in ``columns``. Delete mutations carry
    only the key columns and their values.
    """

    kind: MutationKind
    table: str
    columns: Tuple[str, ...]
    values: Tuple[Any, ...]
    key_columns: Tuple[str, ...] = ()

    @classmethod
    def insert(
        cls, table: str, columns: Sequence[str], values: Sequence[Any], *, key_columns: Sequence[str] = ()
    ) -> "Mutation":
        return cls(MutationKind.INSERT, table, tuple(columns), tuple(values), tuple(key_columns))

    @classmethod
    def update(
        cls, table: str, columns: Sequence[str], values: Sequence[Any], *, key_columns: Sequence[str]
    ) -> "Mutation":
        return cls(MutationKind.UPDATE, table, tuple(columns), tuple(values), tuple(key_columns))

    @classmethod
    def upsert(
        cls, table: str, columns: Sequence[str], values: Sequence[Any], *, key_columns: Sequence[str]
    ) -> "Mutation":
        return cls(MutationKind.UPSERT, table, tuple(columns), tuple(values), tuple(key_columns))

    @classmethod
    def delete(cls, table: str, key_columns: Sequence[str], key_values: Sequence[Any]) -> "Mutation":
        keys = tuple(key_columns)
        return cls(MutationKind.DELETE, table, keys, tuple(key_values), keys)

    def as_dict(self) -> dict[str, Any]:
        return dict(zip(self.columns, self.values))

    def key_values(self) -> Tuple[Any, ...]:
        row = self.as_dict()
        return tuple(row[column] for column in self.key_columns)

    def non_key_columns(self) -> Tuple[str, ...]:
        return tuple(column for column in self.columns if column not in self.key_columns)

    def validate(self) -> None:
        """
        Check structural consistency. Raises ``ValueError`` describing the problem.
        """
        if not isinstance(self.kind, MutationKind):
            raise ValueError(f"Mutation kind must be a MutationKind, got {self.kind!r}")
        if not self.table:
            raise ValueError("Mutation requires a table name.")
        if not self.columns:
            raise ValueError(f"Mutation on '{self.table}' has no columns.")
        if len(self.columns) != len(self.values):
            raise ValueError(
                f"Mutation on '{self.table}' has {len(self.columns)} columns "
                f"but {len(self.values)} values."
            )
        if len(set(self.columns)) != len(self.columns):
            raise ValueError(f"Mutation on '{self.table}' repeats a column.")
        missing = [column for column in self.key_columns if column not in self.columns]
        if missing:
            raise ValueError(
                f"Key columns {missing} are missing from mutation on '{self.table}'."
            )
        if self.kind is not MutationKind.INSERT and not self.key_columns:
            raise ValueError(f"{self.kind.value} mutation on '{self.table}' requires key columns.")

"""
Dialect strategy interfaces describing how mutations are rendered to SQL.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Protocol, Sequence, Tuple

from ..core.mutation import Mutation

Statement = Tuple[str, Tuple[Any, ...]]


@dataclass(frozen=True)
class DialectCapabilities:
    """
    Feature flags describing backend capabilities.
    """

    supports_on_conflict: bool = True
    supports_schema_namespaces: bool = False


class Dialect(Protocol):
    """
    Strategy interface consumed by the SQL client adapters.
    """

    @property
    def name(self) -> str: ...

    @property
    def capabilities(self) -> DialectCapabilities: ...

    def quote_identifier(self, identifier: str) -> str: ...

    def format_table(self, table_name: str) -> str: ...

    def parameter_placeholder(self) -> str: ...

    def adapt_value(self, value: Any) -> Any: ...

    def render_insert(self, mutation: Mutation) -> Statement: ...

    def render_update(self, mutation: Mutation) -> Statement: ...

    def render_upsert(self, mutation: Mutation) -> Statement: ...

    def render_delete(self, mutation: Mutation) -> Statement: ...

    def render_exists(self, mutation: Mutation) -> Statement: ...

    def begin_statements(self, isolation_level: str | None = None) -> List[str]: ...


class MutationRenderer:
    """
    Shared rendering for insert/update/delete; subclasses supply quoting,
    placeholders and capability flags.
    """

    capabilities: DialectCapabilities = DialectCapabilities()

    def begin_statements(self, isolation_level: str | None = None) -> List[str]:
        if isolation_level:
            return [f"BEGIN ISOLATION LEVEL {isolation_level.upper()}"]
        return ["BEGIN"]

    def quote_identifier(self, identifier: str) -> str:
        escaped = identifier.replace('"', '""')
        return f'"{escaped}"'

    def format_table(self, table_name: str) -> str:
        if self.capabilities.supports_schema_namespaces and "." in table_name:
            schema, table = table_name.split(".", 1)
            return f"{self.quote_identifier(schema)}.{self.quote_identifier(table)}"
        return self.quote_identifier(table_name)

    def parameter_placeholder(self) -> str:
        raise NotImplementedError

    def adapt_value(self, value: Any) -> Any:
        return value

    def _columns(self, columns: Sequence[str]) -> str:
        return ", ".join(self.quote_identifier(column) for column in columns)

    def _placeholders(self, count: int) -> str:
        return ", ".join(self.parameter_placeholder() for _ in range(count))

    def _where_keys(self, mutation: Mutation) -> str:
        placeholder = self.parameter_placeholder()
        return " AND ".join(
            f"{self.quote_identifier(column)} = {placeholder}" for column in mutation.key_columns
        )

    def _params(self, values: Sequence[Any]) -> Tuple[Any, ...]:
        return tuple(self.adapt_value(value) for value in values)

    def render_insert(self, mutation: Mutation) -> Statement:
        sql = (
            f"INSERT INTO {self.format_table(mutation.table)} ({self._columns(mutation.columns)}) "
            f"VALUES ({self._placeholders(len(mutation.columns))})"
        )
        return sql, self._params(mutation.values)

    def render_update(self, mutation: Mutation) -> Statement:
        row = mutation.as_dict()
        # A key-only update still has to touch the row; assign the key to itself.
        assigned = mutation.non_key_columns() or mutation.key_columns[:1]
        placeholder = self.parameter_placeholder()
        set_sql = ", ".join(f"{self.quote_identifier(column)} = {placeholder}" for column in assigned)
        sql = f"UPDATE {self.format_table(mutation.table)} SET {set_sql} WHERE {self._where_keys(mutation)}"
        params = [row[column] for column in assigned] + list(mutation.key_values())
        return sql, self._params(params)

    def render_delete(self, mutation: Mutation) -> Statement:
        sql = f"DELETE FROM {self.format_table(mutation.table)} WHERE {self._where_keys(mutation)}"
        return sql, self._params(mutation.key_values())

    def render_exists(self, mutation: Mutation) -> Statement:
        sql = f"SELECT 1 FROM {self.format_table(mutation.table)} WHERE {self._where_keys(mutation)}"
        return sql, self._params(mutation.key_values())

    def render_upsert(self, mutation: Mutation) -> Statement:
        insert_sql, params = self.render_insert(mutation)
        if self.capabilities.supports_on_conflict:
            return f"{insert_sql} {self._conflict_clause(mutation)}", params
        return f"{insert_sql} {self._duplicate_key_clause(mutation)}", params

    def _conflict_clause(self, mutation: Mutation) -> str:
        conflict = self._columns(mutation.key_columns)
        updates = mutation.non_key_columns()
        if not updates:
            return f"ON CONFLICT ({conflict}) DO NOTHING"
        assignments = ", ".join(
            f"{self.quote_identifier(column)} = excluded.{self.quote_identifier(column)}"
            for column in updates
        )
        return f"ON CONFLICT ({conflict}) DO UPDATE SET {assignments}"

    def _duplicate_key_clause(self, mutation: Mutation) -> str:
        # No DO NOTHING form here; reassigning the first key is a no-op update.
        updates = mutation.non_key_columns() or mutation.key_columns[:1]
        assignments = ", ".join(
            f"{self.quote_identifier(column)} = VALUES({self.quote_identifier(column)})"
            for column in updates
        )
        return f"ON DUPLICATE KEY UPDATE {assignments}"

"""
Capability protocol implemented by generated entity models.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from .mutation import Mutation


@runtime_checkable
class Entity(Protocol):
    """
    A row model able to describe its own writes.

    Generated models implement the four builders; txhooks never inspects the
    mutations they return beyond handing them to the transactional client.
    """

    def insert(self) -> Mutation: ...

    def update(self) -> Mutation: ...

    def upsert(self) -> Mutation: ...

    def delete(self) -> Mutation: ...

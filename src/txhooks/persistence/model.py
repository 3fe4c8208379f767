"""
Wrapped model running lifecycle hooks around a transactional mutation.
"""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, Callable, Generic, Optional, TypeVar

from ..core.entity import Entity
from ..core.mutation import Mutation, MutationKind
from ..hooks.dispatcher import HookEvent, HookHandler, HookRegistry
from ..utils import get_logger, time_call
from .transaction import TransactionScope

if TYPE_CHECKING:
    from ..adapters.base import TransactionalClient


E = TypeVar("E", bound=Entity)


class ModelConfigurationError(Exception):
    """Raised when a wrapped model is misconfigured."""


class ClientNotConfiguredError(ModelConfigurationError):
    """Raised when ``apply`` is called on a model without a transactional client."""


class WrappedModel(Generic[E]):
    """
    Couples an entity with its lifecycle hooks and a transactional client.

    Hooks receive ``(txn, model)``; ``model.entity`` is the concrete entity, so
    handlers can change its fields before the primary mutation is built or
    buffer further writes through ``txn.buffer_write``. The transactional
    client may re-run the whole unit of work on contention, so handlers must
    be safe to call more than once.

    Instances are not thread-safe: hooks mutate ``entity`` in place.
    """

    def __init__(
        self,
        entity: E,
        *,
        client: Optional["TransactionalClient"] = None,
        hooks: Optional[HookRegistry] = None,
    ) -> None:
        self.entity = entity
        self.client = client
        self.hooks = hooks if hooks is not None else HookRegistry()
        self.logger = get_logger("persistence.model")

    def __repr__(self) -> str:
        return f"<WrappedModel {self.entity!r} hooks={len(self.hooks)}>"

    # ------------------------------------------------------------------ #
    # Builder delegation
    # ------------------------------------------------------------------ #
    def insert(self) -> Mutation:
        return self.entity.insert()

    def update(self) -> Mutation:
        return self.entity.update()

    def upsert(self) -> Mutation:
        return self.entity.upsert()

    def delete(self) -> Mutation:
        return self.entity.delete()

    def build(self, kind: MutationKind | str) -> Mutation:
        builders: dict[MutationKind, Callable[[], Mutation]] = {
            MutationKind.INSERT: self.insert,
            MutationKind.UPDATE: self.update,
            MutationKind.UPSERT: self.upsert,
            MutationKind.DELETE: self.delete,
        }
        return builders[MutationKind.coerce(kind)]()

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #
    def on(self, event: HookEvent | str, handler: Optional[HookHandler] = None):
        """
        Register ``handler`` for ``event``; without a handler, act as a decorator.
        """
        if handler is None:
            return lambda func: self.hooks.register(event, func)
        return self.hooks.register(event, handler)

    def before(self, kind: MutationKind | str, handler: Optional[HookHandler] = None):
        before_event, _ = MutationKind.coerce(kind).events()
        return self.on(before_event, handler)

    def after(self, kind: MutationKind | str, handler: Optional[HookHandler] = None):
        _, after_event = MutationKind.coerce(kind).events()
        return self.on(after_event, handler)

    # ------------------------------------------------------------------ #
    # Dispatch
    # ------------------------------------------------------------------ #
    def apply(self, kind: MutationKind | str, *, timeout: Optional[float] = None) -> datetime:
        """
        Run the before hooks, the primary mutation and the after hooks in one
        read-write transaction and return its commit timestamp.

        Raises ``UnrecognizedMutationError`` or ``ClientNotConfiguredError``
        before any transaction is opened. Any error raised by a hook, by the
        entity's builder or by the client aborts the transaction and propagates.
        """

        mutation_kind = MutationKind.coerce(kind)
        if self.client is None:
            raise ClientNotConfiguredError(
                f"No transactional client configured for {self.entity.__class__.__name__}."
            )
        before_event, after_event = mutation_kind.events()

        def unit_of_work(txn: TransactionScope) -> None:
            txn.check_deadline()
            self.hooks.fire(before_event, txn, self)
            mutation = self.build(mutation_kind)
            txn.buffer_write([mutation])
            txn.check_deadline()
            self.hooks.fire(after_event, txn, self)

        with time_call(
            f"model.apply.{mutation_kind.value}",
            self.logger,
            threshold_ms=500,
            entity=self.entity.__class__.__name__,
        ):
            try:
                committed = self.client.run_in_transaction(unit_of_work, timeout=timeout)
            except Exception as exc:
                self.logger.debug(
                    "%s of %s aborted: %s",
                    mutation_kind.value,
                    self.entity.__class__.__name__,
                    exc,
                )
                raise
        self.logger.debug(
            "%s of %s committed at %s",
            mutation_kind.value,
            self.entity.__class__.__name__,
            committed,
        )
        return committed

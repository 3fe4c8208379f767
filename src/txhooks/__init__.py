"""
txhooks public package initialization.

Wrap an entity, register lifecycle hooks and apply a mutation inside one
read-write transaction:

    model = WrappedModel(user, client=create_client("sqlite:///app.db"))
    model.before(MutationKind.INSERT, normalize_email)
    committed_at = model.apply(MutationKind.INSERT)
"""

from .adapters import (  # noqa: F401
    AdapterError,
    AlreadyExistsError,
    ConflictError,
    ConnectionConfig,
    NotFoundError,
    TransactionalClient,
    create_client,
)
from .core import COMMIT_TIMESTAMP, Entity, Mutation, MutationKind, UnrecognizedMutationError  # noqa: F401
from .hooks import HookEvent, HookRegistry  # noqa: F401
from .persistence import (  # noqa: F401
    ClientNotConfiguredError,
    DeadlineExceededError,
    MutationBufferError,
    TransactionError,
    TransactionScope,
    WrappedModel,
)

__all__ = [
    "COMMIT_TIMESTAMP",
    "AdapterError",
    "AlreadyExistsError",
    "ClientNotConfiguredError",
    "ConflictError",
    "ConnectionConfig",
    "DeadlineExceededError",
    "Entity",
    "HookEvent",
    "HookRegistry",
    "Mutation",
    "MutationBufferError",
    "MutationKind",
    "NotFoundError",
    "TransactionError",
    "TransactionScope",
    "TransactionalClient",
    "UnrecognizedMutationError",
    "WrappedModel",
    "create_client",
]

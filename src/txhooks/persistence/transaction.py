"""
Transactional scope handed to hooks, and the errors raised while it is open.
"""

from __future__ import annotations

import time
from typing import Any, Iterable, List, Optional

from ..core.mutation import Mutation


class TransactionError(RuntimeError):
    pass


class MutationBufferError(TransactionError):
    """Raised when a mutation cannot be buffered into the transaction."""


class DeadlineExceededError(TransactionError):
    """Raised when the transaction outlives the caller-supplied timeout."""


class TransactionScope:
    """
    Base scope for one read-write transaction attempt.

    Buffered mutations are applied by the owning client at commit time, in the
    order they were buffered. Nothing buffered is visible before commit.
    """

    def __init__(self, *, timeout: Optional[float] = None, deadline: Optional[float] = None) -> None:
        self.timeout = timeout
        if deadline is None and timeout is not None:
            deadline = time.monotonic() + timeout
        # Retried attempts share the deadline computed for the first one.
        self.deadline: Optional[float] = deadline
        self.mutations: List[Mutation] = []
        self.closed = False

    def buffer_write(self, mutations: Iterable[Mutation]) -> None:
        if self.closed:
            raise MutationBufferError("Cannot buffer writes into a finished transaction.")
        batch = list(mutations)
        for mutation in batch:
            if not isinstance(mutation, Mutation):
                raise MutationBufferError(f"Expected a Mutation, got {type(mutation).__name__}.")
            try:
                mutation.validate()
            except ValueError as exc:
                raise MutationBufferError(str(exc)) from exc
        self._buffer(batch)

    def _buffer(self, batch: List[Mutation]) -> None:
        self.mutations.extend(batch)

    def time_remaining(self) -> Optional[float]:
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def check_deadline(self) -> None:
        if self.deadline is not None and time.monotonic() >= self.deadline:
            if self.timeout is None:
                raise DeadlineExceededError("Transaction deadline exceeded.")
            raise DeadlineExceededError(f"Transaction exceeded its {self.timeout}s deadline.")

    def close(self) -> None:
        self.closed = True

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<{self.__class__.__name__} {state} buffered={len(self.mutations)}>"

    def execute(self, sql: str, params: Any = None) -> Any:
        raise NotImplementedError(f"{self.__class__.__name__} does not support ad-hoc statements.")

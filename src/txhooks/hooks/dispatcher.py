"""
Hook registry coordinating lifecycle events around a mutation.
"""

from __future__ import annotations

import enum
from collections import defaultdict
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Tuple

if TYPE_CHECKING:
    from ..persistence.model import WrappedModel
    from ..persistence.transaction import TransactionScope


HookHandler = Callable[["TransactionScope", "WrappedModel[Any]"], Any]


class HookEvent(str, enum.Enum):
    BEFORE_INSERT = "before_insert"
    AFTER_INSERT = "after_insert"
    BEFORE_UPDATE = "before_update"
    AFTER_UPDATE = "after_update"
    BEFORE_UPSERT = "before_upsert"
    AFTER_UPSERT = "after_upsert"
    BEFORE_DELETE = "before_delete"
    AFTER_DELETE = "after_delete"

    @classmethod
    def coerce(cls, value: Any) -> "HookEvent":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                pass
        raise ValueError(f"Unknown hook event: {value!r}")


class HookRegistry:
    """
    Ordered handlers per lifecycle event for one wrapped model.

    Handlers for an event run in registration order; the first exception stops
    the chain and propagates unchanged.
    """

    def __init__(self) -> None:
        self._handlers: Dict[HookEvent, List[HookHandler]] = defaultdict(list)

    def register(self, event: HookEvent | str, handler: HookHandler) -> HookHandler:
        if not callable(handler):
            raise TypeError(f"Hook handler for {event!r} must be callable, got {handler!r}")
        self._handlers[HookEvent.coerce(event)].append(handler)
        return handler

    def unregister(self, event: HookEvent | str, handler: HookHandler) -> None:
        handlers = self._handlers.get(HookEvent.coerce(event), [])
        if handler in handlers:
            handlers.remove(handler)

    def lookup(self, event: HookEvent | str) -> Tuple[HookHandler, ...]:
        return tuple(self._handlers.get(HookEvent.coerce(event), ()))

    def fire(self, event: HookEvent | str, txn: "TransactionScope", model: "WrappedModel[Any]") -> None:
        for handler in self.lookup(event):
            handler(txn, model)

    def clear(self, event: Optional[HookEvent | str] = None) -> None:
        if event is None:
            self._handlers.clear()
            return
        self._handlers.pop(HookEvent.coerce(event), None)

    def __len__(self) -> int:
        return sum(len(handlers) for handlers in self._handlers.values())

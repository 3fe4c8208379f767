"""
Persistence layer: wrapped models and the transactional scope handed to hooks.
"""

from .model import ClientNotConfiguredError, ModelConfigurationError, WrappedModel
from .transaction import (
    DeadlineExceededError,
    MutationBufferError,
    TransactionError,
    TransactionScope,
)

__all__ = [
    "ClientNotConfiguredError",
    "DeadlineExceededError",
    "ModelConfigurationError",
    "MutationBufferError",
    "TransactionError",
    "TransactionScope",
    "WrappedModel",
]

"""
Core building blocks: mutation kinds, mutation values and the entity protocol.
"""

from .entity import Entity
from .mutation import COMMIT_TIMESTAMP, Mutation, MutationKind, UnrecognizedMutationError

__all__ = [
    "COMMIT_TIMESTAMP",
    "Entity",
    "Mutation",
    "MutationKind",
    "UnrecognizedMutationError",
]

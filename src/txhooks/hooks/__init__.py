"""
Lifecycle hooks registry for wrapped models.
"""

from .dispatcher import HookEvent, HookHandler, HookRegistry

__all__ = ["HookEvent", "HookHandler", "HookRegistry"]

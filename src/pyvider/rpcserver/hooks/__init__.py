"""
Lifecycle hooks for the Pyvider RPC Server.
"""

from pyvider.rpcserver.hooks.base import Hook
from pyvider.rpcserver.hooks.registry import LIFECYCLE_EVENTS, HookRegistry

__all__ = [
    "Hook",
    "HookRegistry",
    "LIFECYCLE_EVENTS",
]

# 🐍🏗️🛎️

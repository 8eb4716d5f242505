"""
Hook registry and executor for server lifecycle hooks.
"""

import inspect
from typing import Any, ClassVar

from attrs import define

from pyvider.telemetry import logger

from pyvider.rpcserver.exception import HookNotFoundError
from pyvider.rpcserver.registry import TypeRegistry

LIFECYCLE_EVENTS = ("before_server_start", "after_server_stop")


@define(slots=False)
class HookRegistry(TypeRegistry):
    """Ordered registry of lifecycle hook types and their options."""

    not_found_error: ClassVar[type[HookNotFoundError]] = HookNotFoundError
    kind: ClassVar[str] = "hook"

    def prepare(self) -> list[Any]:
        """Instantiate every registered hook, in registration order."""
        return [entry.type(options=dict(entry.options)) for entry in self._entries]

    async def execute(self, event: str, **kwargs: Any) -> None:
        """
        Run a lifecycle event on every registered hook, in registration order.

        Hooks that do not implement the event are skipped. An exception raised
        by a hook propagates and stops the remaining hooks.

        Args:
            event: One of LIFECYCLE_EVENTS
            **kwargs: Arguments passed to each hook method

        Raises:
            ValueError: If `event` is not a lifecycle event
        """
        if event not in LIFECYCLE_EVENTS:
            raise ValueError(f"Unknown lifecycle event: {event}")

        for hook in self.prepare():
            method = getattr(hook, event, None)
            if method is None:
                continue
            logger.debug(f"🪝 Running {type(hook).__name__}.{event}")
            result = method(**kwargs)
            if inspect.isawaitable(result):
                await result

# 🐍🏗️🛎️

"""
Base class for server lifecycle hooks.
"""

from typing import Any

from attrs import define, field


@define(slots=False)
class Hook:
    """
    A server lifecycle hook.

    Subclasses override the lifecycle methods they care about. Methods may be
    plain functions or coroutines; both receive the server as a keyword
    argument.

    Attributes:
        options: The options the hook was registered with
    """

    options: dict[str, Any] = field(factory=dict)

    def before_server_start(self, server: Any) -> None:
        """Called before the runtime is built and bound."""

    def after_server_stop(self, server: Any) -> None:
        """Called once the runtime has stopped and the shutdown task is joined."""

# 🐍🏗️🛎️

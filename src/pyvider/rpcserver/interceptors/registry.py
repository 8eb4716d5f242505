"""
Interceptor registry for the RPC server.

Interceptors run in registration order. The registry can reposition them
relative to one another before the server boots and materializes the chain
handed to the gRPC runtime.
"""

from typing import Any, ClassVar

from attrs import define

from pyvider.telemetry import logger

from pyvider.rpcserver.exception import InterceptorNotFoundError
from pyvider.rpcserver.registry import TypeRegistry


@define(slots=False)
class InterceptorRegistry(TypeRegistry):
    """Ordered registry of interceptor types and their options."""

    not_found_error: ClassVar[type[InterceptorNotFoundError]] = InterceptorNotFoundError
    kind: ClassVar[str] = "interceptor"

    def prepare(self, request: Any = None, call_context: Any = None) -> list[Any]:
        """
        Instantiate every registered interceptor, in registration order.

        Each interceptor is built as
        ``klass(request=request, call_context=call_context, options=options)``
        with its own copy of the options it was registered with.

        Args:
            request: The request the chain is prepared for, if any
            call_context: The call context the chain is prepared for, if any

        Returns:
            The instantiated interceptor chain
        """
        chain = [
            entry.type(request=request, call_context=call_context, options=dict(entry.options))
            for entry in self._entries
        ]
        logger.debug(
            f"🧱🔗 Prepared interceptor chain: {[type(i).__name__ for i in chain]}"
        )
        return chain

# 🐍🏗️🛎️

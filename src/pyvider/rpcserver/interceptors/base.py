"""
Base class for server interceptors managed by the interceptor registry.
"""

from typing import Any
from collections.abc import Awaitable, Callable

import grpc
from attrs import define, field


@define(slots=False)
class ServerInterceptor(grpc.aio.ServerInterceptor):
    """
    A gRPC server interceptor instantiated from an interceptor registry entry.

    The registry builds every interceptor with the request and call context
    it was prepared for plus the options it was registered with. Subclasses
    override `intercept_service`; the default implementation passes the call
    through unchanged.

    Attributes:
        request: The request the chain was prepared for, if any
        call_context: The call context the chain was prepared for, if any
        options: The options the interceptor was registered with
    """

    request: Any = field(default=None)
    call_context: Any = field(default=None)
    options: dict[str, Any] = field(factory=dict)

    async def intercept_service(
        self,
        continuation: Callable[[grpc.HandlerCallDetails], Awaitable[grpc.RpcMethodHandler]],
        handler_call_details: grpc.HandlerCallDetails,
    ) -> grpc.RpcMethodHandler:
        return await continuation(handler_call_details)

# 🐍🏗️🛎️

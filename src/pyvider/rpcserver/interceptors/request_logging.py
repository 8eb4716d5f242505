"""
Request logging interceptor.

Logs every unary RPC handled by an async servicer method together with its
outcome and duration.
"""

import inspect
import time
from typing import Any
from collections.abc import Awaitable, Callable

import grpc

from pyvider.telemetry import logger

from pyvider.rpcserver.interceptors.base import ServerInterceptor


class RequestLoggingInterceptor(ServerInterceptor):
    """
    Logs method, outcome and elapsed time of each unary-unary call.

    Options:
        log_level: "debug" or "info" (default) for successful calls
        ignore_methods: Full method names (e.g. "/grpc.health.v1.Health/Check")
            that are not logged

    Synchronous servicer methods and streaming methods pass through unlogged.
    """

    async def intercept_service(
        self,
        continuation: Callable[[grpc.HandlerCallDetails], Awaitable[grpc.RpcMethodHandler]],
        handler_call_details: grpc.HandlerCallDetails,
    ) -> grpc.RpcMethodHandler:
        handler = await continuation(handler_call_details)
        method = handler_call_details.method

        if handler is None or method in self.options.get("ignore_methods", ()):
            return handler
        if handler.unary_unary is None or not inspect.iscoroutinefunction(handler.unary_unary):
            return handler

        return grpc.unary_unary_rpc_method_handler(
            self._wrap(method, handler.unary_unary),
            request_deserializer=handler.request_deserializer,
            response_serializer=handler.response_serializer,
        )

    def _wrap(self, method: str, behavior: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        log = getattr(logger, self.options.get("log_level", "info"))

        async def logged(request: Any, context: grpc.aio.ServicerContext) -> Any:
            started = time.perf_counter()
            try:
                response = await behavior(request, context)
            except Exception as e:
                logger.error(
                    f"📨❌ {method} failed after {_elapsed_ms(started):.2f}ms",
                    extra={"method": method, "error": str(e)},
                )
                raise
            log(
                f"📨✅ {method} completed in {_elapsed_ms(started):.2f}ms",
                extra={"method": method},
            )
            return response

        return logged


def _elapsed_ms(started: float) -> float:
    return (time.perf_counter() - started) * 1000

# 🐍🏗️🛎️
